"""Text command handling: parsing, the grammar table, and per-verb handlers.

Every player submission flows through `CommandInterpreter.interpret`, so local
validation, remote errors and log output behave the same for every verb.
"""
