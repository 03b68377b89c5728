"""Attack payloads for security testing."""

# Payloads that execute code when loaded with an unsafe YAML loader
YAML_CODE_EXECUTION = [
    "!!python/object/apply:os.system ['echo pwned']",
    "!!python/object/new:os.system ['id']",
    "!!python/object/apply:subprocess.check_output [['whoami']]",
    '!!python/object/apply:eval [\'__import__("os").system("malicious")\']',
]

# Values that only look like expressions; they must stay literal
ENV_VAR_INJECTION = [
    "${__import__('os').system('malicious')}",
    "${eval('malicious')}",
    "$(malicious)",
    "`whoami`",
    "$((1+1))",
]

# Unit names trying to escape the artifact directory
PATH_TRAVERSAL = [
    "../../../etc/passwd",
    "..\\..\\..\\windows\\system32\\config\\sam",
    "....//....//etc/passwd",
    "/etc/shadow",
    "//etc/passwd",
    "file:///etc/passwd",
    "../../sensitive\x00.png",
    "~/.ssh/id_rsa",
]
