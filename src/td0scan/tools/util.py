# td0scan/tools/util.py
#
# td0scan command line: Utility functions.
#
# This is free and unencumbered software released into the public domain.
# See the file COPYING for more details, or visit <http://unlicense.org>.

import argparse
import itertools as it

from td0scan import config


def columnify(strings, columns=80, sep=2):
    max_len = max(len(s) for s in strings) + sep
    per_row = max(1, columns // max_len)
    return '\n'.join(map(lambda row: (f'{{:{max_len}}}'*per_row).format(*row),
                         it.zip_longest(*[iter(strings)]*per_row,
                                        fillvalue='')))


class CmdlineHelpFormatter(argparse.ArgumentDefaultsHelpFormatter,
                           argparse.RawDescriptionHelpFormatter):
    def _get_help_string(self, action):
        help = action.help
        if '%no_default' in help:
            return help.replace('%no_default', '')
        if ('%(default)' in help
            or action.default is None
            or action.default is False
            or action.default is argparse.SUPPRESS):
            return help
        return help + ' (default: %(default)s)'


class ArgumentParser(argparse.ArgumentParser):
    def __init__(self, formatter_class=CmdlineHelpFormatter, *args, **kwargs):
        return super().__init__(formatter_class=formatter_class,
                                allow_abbrev=False,
                                *args, **kwargs)

def min_int(_min):
    def x(value):
        ivalue = int(value, 0)
        if ivalue < _min:
            raise argparse.ArgumentTypeError("must be %d or greater" % _min)
        return ivalue
    return x
uint = min_int(0)

def sector_size(value):
    ivalue = int(value, 0)
    if ivalue < 32 or ivalue % 32:
        raise argparse.ArgumentTypeError("must be a multiple of 32")
    return ivalue

config_desc = """\
CONFIG: Settings file of 'key = value' lines. Keys:
""" + columnify(list(config.ScanConfig().settings().keys())) + """
  Override single keys with --set KEY=VALUE (repeatable).
"""

def add_config_args(parser):
    parser.add_argument("--config", metavar="FILE",
                        help="settings file (see CONFIG below)")
    parser.add_argument("--set", action="append", default=[],
                        metavar="KEY=VAL", dest="settings",
                        help="override a single setting%no_default")

def config_from_args(args):
    return config.load_config(args.config, args.settings)


# Local variables:
# python-indent: 4
# End:
