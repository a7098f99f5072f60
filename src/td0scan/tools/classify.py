# td0scan/tools/classify.py
#
# td0scan command line: Run the directory-entry classifier over a raw dump.
#
# This is free and unencumbered software released into the public domain.
# See the file COPYING for more details, or visit <http://unlicense.org>.

description = "Classify 32-byte slots of a raw sector dump as FAT or CP/M."

import sys

from td0scan.tools import util
from td0scan import error
from td0scan.fs.classify import Unclassified, classify_sector
from td0scan.report import Report, hexdump, slot_line


def main(argv) -> int:

    parser = util.ArgumentParser(usage='%(prog)s [options] file',
                                 epilog=util.config_desc)
    util.add_config_args(parser)
    parser.add_argument("--offset", type=util.uint, default=0,
                        help="byte offset of the first sector")
    parser.add_argument("--sector-size", type=util.sector_size, default=512,
                        help="sector size in bytes")
    parser.add_argument("--length", type=util.uint,
                        help="bytes to examine (default: to end of file)")
    parser.add_argument("file", help="raw image or sector dump")
    parser.description = description
    parser.prog += ' ' + argv[1]
    args = parser.parse_args(argv[2:])

    config = util.config_from_args(args)
    report = Report(sys.stdout, dump=config.dump)

    try:
        with open(args.file, 'rb') as f:
            f.seek(args.offset)
            dat = f.read() if args.length is None else f.read(args.length)
    except OSError as err:
        raise error.Fatal('%s: %s' % (args.file, err.strerror))

    nr = 0
    for sec_off in range(0, len(dat), args.sector_size):
        sec = dat[sec_off:sec_off+args.sector_size]
        base = args.offset + sec_off
        for result in classify_sector(sec, config):
            if not isinstance(result, Unclassified):
                print('%08x %s' % (base + result.offset, result))
                nr += 1
            elif report.want_dump(result):
                print(slot_line(result, '%08x' % (base + result.offset)))
                for l in hexdump(result.raw, base + result.offset):
                    print('  ' + l)

    print('%d directory entries' % nr)
    return 0


# Local variables:
# python-indent: 4
# End:
