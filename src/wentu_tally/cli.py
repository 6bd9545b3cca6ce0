"""
Module that contains the command line app.
"""
import argparse
import json
import logging
import os

import wentu_tally.batch as batch

from wentu_tally.parsers import event_csv
from wentu_tally.rcv.variants import SingleWinner


def _abs_dir(path, arg_name):

    if not os.path.isabs(path):
        path = f'{os.getcwd()}/{path}'

    if not os.path.isdir(path):
        raise RuntimeError(f'invalid path [{arg_name}]: {path}')

    return path


def _tally(args):

    event_path = _abs_dir(args.event_path, 'event_path')

    rcv_obj = SingleWinner(event=os.path.basename(os.path.normpath(event_path)),
                           parser_func=event_csv,
                           parser_args={'event_path': event_path})

    print(json.dumps(rcv_obj.get_round_by_round_dict(), indent=args.indent))

    if args.table:
        print(rcv_obj.get_round_by_round_table().to_string(index=False))

    return 0


def _batch(args):

    event_set_path = _abs_dir(args.event_set_path, 'event_set_path')
    output_path = _abs_dir(args.output, 'output') if args.output else event_set_path

    n_errors = batch.analyze_event_set(event_set_path, output_path, fresh_output=args.fresh)

    return 1 if n_errors else 0


def main(argv=None):

    # argument parse and valid
    p = argparse.ArgumentParser(description='Tally ranked date options of scheduling events.')
    p.add_argument('--log-level', default='WARNING', choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                   help='Logging level, defaults to WARNING.')

    sub = p.add_subparsers(dest='command')
    sub.required = True

    tally_p = sub.add_parser('tally', help='Tally a single event directory and print the round by round result.')
    tally_p.add_argument('event_path', help='Path to directory containing date_options.csv and rankings.csv.')
    tally_p.add_argument('--table', action='store_true', help='Also print the round by round table.')
    tally_p.add_argument('--indent', type=int, default=2, help='JSON indent, defaults to 2.')
    tally_p.set_defaults(func=_tally)

    batch_p = sub.add_parser('batch', help='Tally every event listed in an event set.')
    batch_p.add_argument('event_set_path', help='Path to directory containing event_set.csv and run_config.json.')
    batch_p.add_argument('--output', help='By default all output will be written to event_set_path, '
                                          'provide this argument to specify an alternative.')
    batch_p.add_argument('--fresh', action='store_true',
                         help='Delete existing results/ directory located in the output path.')
    batch_p.set_defaults(func=_batch)

    args = p.parse_args(argv)

    logging.basicConfig(level=getattr(logging, args.log_level),
                        format='%(asctime)s %(levelname)s %(name)s: %(message)s')

    return args.func(args)
