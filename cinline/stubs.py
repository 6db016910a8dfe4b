"""Throwing placeholder bodies for functions that were not translated."""

UNIMPLEMENTED_EXCEPTION = "NotImplementedException"


def comment_out(code: str) -> str:
    return "\n".join("// " + line for line in code.split("\n"))


def unimplemented_stub(message: str) -> str:
    escaped = message.replace("\\", "\\\\").replace('"', '\\"')
    return f'throw new {UNIMPLEMENTED_EXCEPTION}("{escaped}");'


def is_stub(body: str) -> bool:
    return UNIMPLEMENTED_EXCEPTION in body
