"""
Command line interface

Runs one generation session: an optional initial scan followed by any number
of module-load events, committing the generated files after each batch.
"""

import argparse
from pathlib import Path
from typing import Optional

from .config import GeneratorConfig, load_config
from .errors import GlueGenError
from .generator import Generator
from .ir import TypeGraph
from .logging import configure_logging, get_logger
from .modules import PLUGIN_PROJECT, PLUGIN_ENGINE, PLUGIN_ENTERPRISE

logger = get_logger('cli')

PLUGIN_TYPES = (PLUGIN_PROJECT, PLUGIN_ENGINE, PLUGIN_ENTERPRISE, 'other')


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Generate C# glue from a native type graph')
    parser.add_argument('--graph', default=None,
                        help='Type graph JSON of the initial scan')
    parser.add_argument('--module-graph', action='append', default=[], metavar='PATH',
                        help='Type graph JSON of a loaded module (repeatable, in load order)')
    parser.add_argument('--output', default=None,
                        help='Generated scripts directory')
    parser.add_argument('--project', default=None,
                        help='Consuming project directory')
    parser.add_argument('--config', default=None,
                        help='Generator config JSON')
    parser.add_argument('--policy', default=None,
                        help='Filter policy JSON (blacklist / whitelist / greylist / internal_whitelist)')
    parser.add_argument('--host-plugin-type', choices=PLUGIN_TYPES, default=None,
                        help='Plugin type of the plugin hosting the generator')
    parser.add_argument('--no-defaults', action='store_true',
                        help='Do not apply the built-in Unreal policy')
    parser.add_argument('--verbose', action='store_true',
                        help='Enable debug logging')
    parser.add_argument('--log-file', type=Path, default=None,
                        help='Also write the log to this file')
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.graph is None and not args.module_graph:
        parser.error('one of --graph or --module-graph is required')

    configure_logging(verbose=args.verbose, log_file=args.log_file)

    try:
        config = load_config(args.config) if args.config else GeneratorConfig()
        config.update(
            output_dir=args.output,
            project_dir=args.project,
            host_plugin_type=args.host_plugin_type,
            policy_path=args.policy,
        )

        gen = Generator.from_config(config)
        if not args.no_defaults:
            from bindings import unreal
            unreal.configure(gen)

        if args.graph is not None:
            gen.start(TypeGraph.load(args.graph))
        for path in args.module_graph:
            logger.info('  %s', path)
            gen.on_module_loaded(TypeGraph.read_document(path))
    except GlueGenError as exc:
        logger.error('%s', exc)
        return 1

    logger.info('=== Exported %d types', len(gen.exported_types))
    return 0
