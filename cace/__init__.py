"""CACE: Cross-Agent Compatibility Engine.

Converts AI coding-assistant configuration artifacts (skills, commands,
workflows, rules, hooks, memory files) between agent dialects through a
canonical intermediate representation, and reports what each conversion
preserved or lost.
"""

__version__ = "0.4.0"

# Version of the ComponentSpec IR shape (bumped on incompatible changes
# to the JSON export format).
IR_VERSION = "1.0.0"
