"""
Sample session configuration data for testing
"""

# Minimal valid configuration
MINIMAL_CONFIG = {
    "host": "irc.example.org",
    "user_name": "user",
    "nick_name": "myself",
    "real_name": "Real Name",
}

# Everything set explicitly
FULL_CONFIG = {
    "host": "irc.example.org",
    "port": 6697,
    "user_name": "user",
    "nick_name": "myself",
    "real_name": "Real Name",
    "encoding": "utf-8",
    "secure": True,
    "password": "hunter2",
    "capabilities": ["sasl", "identify-msg", "sasl"],
}

# Wrapped in a "session" object as written by the example config file
WRAPPED_CONFIG = {"session": dict(MINIMAL_CONFIG)}

INVALID_CONFIGS = {
    "missing_host": {k: v for k, v in MINIMAL_CONFIG.items() if k != "host"},
    "bad_port": {**MINIMAL_CONFIG, "port": 70000},
    "blank_nick": {**MINIMAL_CONFIG, "nick_name": "   "},
    "bad_encoding": {**MINIMAL_CONFIG, "encoding": "klingon"},
}
