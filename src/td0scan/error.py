# td0scan/error.py
#
# Error management and reporting.
#
# This is free and unencumbered software released into the public domain.
# See the file COPYING for more details, or visit <http://unlicense.org>.

class Fatal(Exception):
    pass

# Signature is not plain 'TD': skip the stream, carry on with the batch.
class NotATD0Image(Fatal):
    def __init__(self, desc, signature=b''):
        super().__init__(desc)
        self.signature = signature

# Fewer bytes available than a record requires: abandon this stream.
class TruncatedStream(Fatal):
    pass

# Decoded sector length differs from the size in its sector header.
class LengthMismatch(Fatal):
    pass

class UnknownEncodingMethod(Fatal):
    pass

# Comment text did not decode cleanly. Recovered by substitution, so this
# is only ever reported, never raised by the scanner.
class InvalidCommentText(Fatal):
    pass

class ConfigError(Fatal):
    pass

def check(pred, desc, exc=Fatal):
    if not pred:
        raise exc(desc)
    
# Local variables:
# python-indent: 4
# End:
