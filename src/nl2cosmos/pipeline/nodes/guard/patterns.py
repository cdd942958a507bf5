QUERY_INJECTION_PATTERNS = (
    "drop ", "delete ", "insert ", "update ", "alter ", "create ",
    "truncate ", "exec ", "execute ", "sp_", "xp_", "--", "/*", "*/",
    "union select", "' or '", "1=1", "1 = 1",
)

PROMPT_INJECTION_PATTERNS = (
    "ignore previous", "forget everything", "system prompt", "override",
    "admin access", "root access", "bypass", "jailbreak", "disable safety",
)
