"""Starter .safemongo.toml template."""

DEFAULT_TOML = """\
# SafeMongo Configuration
version = "1.0"

[scan]
fail_on = "high"          # low | medium | high — fail at or above this level
extensions = [".js", ".jsx", ".ts", ".tsx", ".mjs", ".cjs"]
max_file_size_kb = 512

[output]
format = "terminal"       # terminal | json | sarif
show_summary = true
show_examples = false

[rules]
# enable = ["NOSQL_INJECTION_OBJECT", "EVAL_USAGE"]   # empty = all enabled
# disable = ["MONGOOSE_QUERY_EXEC_MISSING"]

[ignore]
# paths = ["node_modules/*", "*/node_modules/*", "dist/*"]
# rules = ["SECRETS_IN_QUERY"]

[logging]
level = "WARNING"         # DEBUG | INFO | WARNING | ERROR
"""
