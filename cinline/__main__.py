import argparse
import json
import os
import sys

from cinline import logging as cinline_logging
from cinline import utils
from cinline.cache import load_baseline
from cinline.data_types import compute_body_hash
from cinline.emitter import write_inline_functions
from cinline.manifest import load_units
from cinline.translator import InlineFunctionTranslator, TranslationSummary


def parse_translate(parser):
    parser.add_argument(
        'units_file',
        type=str,
        help='The JSON manifest of inline functions produced by the header parser'
    )

    parser.add_argument(
        'output_file',
        type=str,
        help='The C# file to generate'
    )

    parser.add_argument(
        '--baseline',
        '-b',
        type=str,
        help='The previously generated C# file whose bodies are reused when the C source is unchanged, default to output_file'
    )

    parser.add_argument(
        '--config',
        '-c',
        type=str,
        dest='config_file',
        help='The configuration file to use'
    )

    parser.add_argument(
        '--namespace',
        type=str,
        help='The namespace of the generated class, overrides general.namespace'
    )

    parser.add_argument(
        '--type-name',
        type=str,
        help='The name of the generated partial class, overrides general.type_name'
    )

    parser.add_argument(
        '--workers',
        '-j',
        type=int,
        help='The number of worker threads, overrides general.max_workers'
    )

    parser.add_argument(
        '--report',
        '-r',
        type=str,
        help='The path to write a json report with the outcome of every function'
    )

    parser.add_argument(
        '--log-level',
        type=str,
        help='Console log level, overrides logging.console_level'
    )

    parser.add_argument(
        '--log-dir',
        type=str,
        help='Directory to write log files to, overrides logging.dir'
    )

    parser.add_argument(
        '--jsonl',
        action='store_true',
        help='Also write a json lines log next to the text log, requires a log directory'
    )

    parser.add_argument(
        '--no-color',
        action='store_true',
        help='Disable colored console output'
    )

    parser.add_argument(
        '--strict',
        action='store_true',
        help='Exit with a non-zero status when any function could not be translated'
    )


def parse_hash(parser):
    parser.add_argument(
        'body_file',
        type=str,
        help='A file containing a verbatim C function body'
    )


def write_report(path, results):
    entries = []
    for result in results:
        entries.append({
            "name": result.name,
            "outcome": result.outcome.value,
            "reason": getattr(result, "reason", None),
        })
    report_dir = os.path.dirname(path)
    if report_dir:
        os.makedirs(report_dir, exist_ok=True)
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(entries, f, indent=4)


def translate(parser, args):
    config = utils.try_load_config(args.config_file)
    cinline_logging.configure_logging(
        config,
        console_level_override=args.log_level,
        log_dir_override=args.log_dir,
        disable_color=args.no_color,
        enable_jsonl_override=True if args.jsonl else None,
    )
    general = config.get('general', {})

    namespace = args.namespace or general.get('namespace')
    type_name = args.type_name or general.get('type_name')
    if not namespace or not type_name:
        parser.error('A namespace and a type name are required')
    workers = args.workers if args.workers is not None else general.get('max_workers', 1)
    if workers < 1:
        parser.error('--workers must be at least 1')

    units = load_units(args.units_file)
    cache = load_baseline(args.baseline or args.output_file)

    translator = InlineFunctionTranslator.from_config(config, cache)
    results = translator.translate_all(units, max_workers=workers)

    write_inline_functions(
        args.output_file,
        units,
        results,
        namespace=namespace,
        type_name=type_name,
        file_header=general.get('file_header') or None,
    )
    if args.report:
        write_report(args.report, results)

    summary = TranslationSummary.from_results(results)
    if args.strict and summary.failed:
        print(f'❌ {summary.failed} of {summary.total} functions need manual conversion', file=sys.stderr)
        sys.exit(1)
    print(f'✅ {summary.translated} translated, {summary.reused} reused, {summary.failed} failed')


def hash_body(parser, args):
    if not os.path.isfile(args.body_file):
        parser.error(f'Could not find file {args.body_file}')
    # newline="" keeps CRLF bodies byte-identical to what the header parser saw
    with open(args.body_file, 'r', encoding='utf-8', newline='') as f:
        print(compute_body_hash(f.read()))


def main(argv=None):
    parser = argparse.ArgumentParser(
        description='cinline: translate inline C function bodies into C#'
    )

    subparsers = parser.add_subparsers(
        dest='subcommand',
        description='valid subcommands for cinline',
        help='Use one of these subcommands followed by -h for additional help',
        required=True
    )

    translate_parser = subparsers.add_parser(
        'translate',
        help='Translate the inline functions of a manifest into a C# file'
    )

    hash_parser = subparsers.add_parser(
        'hash',
        help='Print the body hash used to match cached translations'
    )

    parse_translate(translate_parser)
    parse_hash(hash_parser)

    args = parser.parse_args(argv)

    match args.subcommand:
        case 'translate':
            translate(parser, args)
        case 'hash':
            hash_body(parser, args)
        case _:
            parser.print_help()


if __name__ == '__main__':
    main()
