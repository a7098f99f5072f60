# td0scan/tools/scan.py
#
# td0scan command line: Scan files, directories and archives for TD0 images.
#
# This is free and unencumbered software released into the public domain.
# See the file COPYING for more details, or visit <http://unlicense.org>.

description = "Scan TD0 images (plain, zip, tar, gzip) for directory entries."

import sys

from td0scan.tools import util
from td0scan import events
from td0scan.report import Report
from td0scan.scan import scan_paths


def main(argv) -> int:

    parser = util.ArgumentParser(usage='%(prog)s [options] path...',
                                 epilog=util.config_desc)
    util.add_config_args(parser)
    parser.add_argument("--dump", choices=['none', 'ambiguous', 'all'],
                        help="hex dump unclassified slots "
                        "(default: from settings)")
    parser.add_argument("--summary", action="store_true",
                        help="print per-image totals")
    parser.add_argument("paths", nargs='+', metavar="path",
                        help="file or directory to scan")
    parser.description = description
    parser.prog += ' ' + argv[1]
    args = parser.parse_args(argv[2:])

    config = util.config_from_args(args)
    if args.dump is not None:
        config.dump = args.dump
    report = Report(sys.stdout, dump=config.dump)

    nr_images, nr_failed = 0, 0
    for source, evs in scan_paths(args.paths, config):
        report.emit(source.kind, source.path, evs)
        if any(isinstance(e, events.ImageOpened) for e in evs):
            nr_images += 1
        if any(isinstance(e, events.StreamFailed) for e in evs):
            nr_failed += 1
        if args.summary:
            print('    %s' % report.summary(evs))

    if args.summary:
        print('%d images, %d failed' % (nr_images, nr_failed))

    return 0


# Local variables:
# python-indent: 4
# End:
