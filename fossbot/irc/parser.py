"""IRC message parsing utilities."""

from __future__ import annotations

from .models import ParsedMessage


def ping_token(line: str) -> str | None:
    """Return the token to echo in a PONG if ``line`` is a server PING.

    ``"PING :wolfe.example.net"`` yields ``":wolfe.example.net"``.
    """
    if not line.startswith("PING"):
        return None
    return line[4:].strip()


def parse_line(line: str) -> ParsedMessage | None:
    """Split a line into sender, command and payload.

    Lines missing any of the three parts are malformed and yield None.
    """
    parts = line.split(None, 2)
    if len(parts) < 3:
        return None
    prefix, command, payload = parts
    sender = prefix[1:] if prefix.startswith(":") else prefix
    if not sender:
        return None
    return ParsedMessage(sender=sender, command=command, target="", payload=payload)


def numeric_code(command: str) -> int | None:
    """Return the reply code if ``command`` is a positive numeric reply."""
    if not (command.isascii() and command.isdigit()):
        return None
    code = int(command)
    return code if code > 0 else None


def strip_hostmask(sender: str) -> str | None:
    """``nick!user@host`` -> ``nick``. None if the sender has no hostmask."""
    nick, sep, _ = sender.partition("!")
    if not sep or not nick:
        return None
    return nick


def is_channel(name: str) -> bool:
    return "#" in name


def resolve_reply_target(message: ParsedMessage) -> ParsedMessage | None:
    """Resolve where replies to a PRIVMSG/NOTICE should go.

    The first payload token is the target. Channel messages reply to the
    channel; private messages (target without '#') reply to the sender's nick.
    The returned payload is what follows the target token.
    """
    nick = strip_hostmask(message.sender)
    if nick is None:
        return None
    target, _, rest = message.payload.partition(" ")
    if not target:
        return None
    reply_to = target if is_channel(target) else nick
    return ParsedMessage(
        sender=nick, command=message.command, target=reply_to, payload=rest
    )


def split_text(payload: str) -> tuple[str, str]:
    """Split trailing text into its first word and the rest.

    The leading ':' of an IRC trailing parameter is removed.
    """
    text = payload[1:] if payload.startswith(":") else payload
    first, _, rest = text.partition(" ")
    return first, rest.strip()
