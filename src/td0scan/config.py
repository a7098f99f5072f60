# td0scan/config.py
#
# Scanner settings: packaged defaults, optional user file, overrides.
#
# This is free and unencumbered software released into the public domain.
# See the file COPYING for more details, or visit <http://unlicense.org>.

from __future__ import annotations
from typing import Dict, List, Optional

import os.path, re
import importlib.resources

from td0scan import error

CLASSIFY_MODES = [ 'all', 'first', 'none' ]
DUMP_MODES = [ 'none', 'ambiguous', 'all' ]

def _int_param(key: str, val: str, lo: int, hi: int) -> int:
    try:
        n = int(val, 0)
    except ValueError:
        raise error.ConfigError('%s: not an integer: %s' % (key, val))
    error.check(lo <= n <= hi, '%s out of range (%d-%d)' % (key, lo, hi),
                error.ConfigError)
    return n

def _bool_param(key: str, val: str) -> bool:
    bools = { 'yes': True, 'true': True, 'on': True, '1': True,
              'no': False, 'false': False, 'off': False, '0': False }
    error.check(val.lower() in bools, '%s: expected yes or no' % key,
                error.ConfigError)
    return bools[val.lower()]

def _choice_param(key: str, val: str, choices: List[str]) -> str:
    error.check(val in choices, '%s: expected one of: %s'
                % (key, ', '.join(choices)), error.ConfigError)
    return val


class ScanConfig:

    def __init__(self) -> None:
        self.fat_reserved_nonzero_max = 2
        self.cpm_max_record_count = 128
        self.trailing_probe = 64
        self.skip_dataless_sectors = False
        self.classify = 'all'
        self.dump = 'ambiguous'

    def add_param(self, key: str, val: str) -> None:
        if key == 'fat.reserved_nonzero_max':
            self.fat_reserved_nonzero_max = _int_param(key, val, 0, 10)
        elif key == 'cpm.max_record_count':
            self.cpm_max_record_count = _int_param(key, val, 0, 255)
        elif key == 'trailing_probe':
            self.trailing_probe = _int_param(key, val, 0, 65536)
        elif key == 'skip_dataless_sectors':
            self.skip_dataless_sectors = _bool_param(key, val)
        elif key == 'classify':
            self.classify = _choice_param(key, val, CLASSIFY_MODES)
        elif key == 'dump':
            self.dump = _choice_param(key, val, DUMP_MODES)
        else:
            raise error.ConfigError('unrecognised option: %s' % key)

    def settings(self) -> Dict[str,str]:
        return { 'fat.reserved_nonzero_max':
                 str(self.fat_reserved_nonzero_max),
                 'cpm.max_record_count': str(self.cpm_max_record_count),
                 'trailing_probe': str(self.trailing_probe),
                 'skip_dataless_sectors':
                 ('no','yes')[self.skip_dataless_sectors],
                 'classify': self.classify,
                 'dump': self.dump }


class ConfigFile:
    def __init__(self, name: Optional[str]) -> None:
        self.path: Optional[str] = None
        self.name: str = 'td0scan.cfg' if name is None else name
        if name is None:
            res = importlib.resources.files('td0scan.data') / self.name
            with res.open('r') as f:
                self.lines = f.readlines()
        else:
            self.path = os.path.expanduser(self.name)
            with open(self.path, 'r') as f:
                self.lines = f.readlines()


def apply_lines(config: ScanConfig, name: str, lines: List[str]) -> None:
    for linenr, l in enumerate(lines, start=1):
        try:
            # Strip comments and whitespace.
            match = re.match(r'\s*([^#]*)', l)
            assert match is not None # mypy
            t = match.group(1).strip()

            # Skip empty lines.
            if not t:
                continue

            keyval_match = re.match(r'([a-zA-Z0-9._-]+)\s*=\s*(\S+)$', t)
            error.check(keyval_match is not None, 'syntax error',
                        error.ConfigError)
            assert keyval_match is not None # mypy
            config.add_param(keyval_match.group(1), keyval_match.group(2))

        except error.ConfigError as err:
            raise error.ConfigError('At %s, line %d: %s'
                                    % (name, linenr, err)) from None

def apply_overrides(config: ScanConfig, overrides: List[str]) -> None:
    for x in overrides:
        try:
            key, val = x.split('=', 1)
        except ValueError:
            raise error.ConfigError('bad setting (expected KEY=VALUE): %s'
                                    % x)
        config.add_param(key.strip(), val.strip())

def load_config(filename: Optional[str] = None,
                overrides: Optional[List[str]] = None) -> ScanConfig:
    config = ScanConfig()
    defaults = ConfigFile(None)
    apply_lines(config, defaults.name, defaults.lines)
    if filename is not None:
        try:
            user = ConfigFile(filename)
        except OSError as err:
            raise error.ConfigError('%s: %s' % (filename, err.strerror))
        apply_lines(config, user.name, user.lines)
    if overrides:
        apply_overrides(config, overrides)
    return config

# Local variables:
# python-indent: 4
# End:
