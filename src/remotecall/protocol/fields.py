"""Protocol constants.

Keep these in one place to avoid stringly-typed message handling.
"""

# Envelope fields, as posted on the wire.
FROM = "from"
CONTENT = "content"

# Request target fields, inside the decoded content.
OPERATION = "operation"
PARAMS = "params"

# Field name used by legacy peers for OPERATION; accepted on receipt only.
LEGACY_OPERATION = "class"

# Reply payload fields.
VALUE = "value"
ERROR = "error"
ERROR_TYPE = "type"
ERROR_TEXT = "text"

# Separator between a target and an operation in a command string.
SEPARATOR = "::"

# Operation invoked when a command names only a target.
DEFAULT_OPERATION = "run"

# Allow list token matching every caller.
WILDCARD = "*"

HTTP_OK = 200
