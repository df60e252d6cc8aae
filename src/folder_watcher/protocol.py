"""JSON text frame codec for the client protocol."""

import json

from .exceptions import ProtocolError
from .models import Command, Event, event_from_dict


def encode_event(event: Event) -> str:
    """Serialize an event into one text frame."""
    return json.dumps(event.to_dict())


def decode_event(text: str) -> Event:
    """
    Parse a text frame into an event.
    
    Raises:
        ProtocolError: If the frame is not a valid event
    """
    try:
        data = json.loads(text)
        if not isinstance(data, dict):
            raise ValueError("expected a JSON object")
        return event_from_dict(data)
    except (ValueError, RecursionError) as e:
        raise ProtocolError(f"Invalid event: {e}") from e


def encode_command(command: Command) -> str:
    """Serialize a command into one text frame."""
    return json.dumps(command.to_dict())


def decode_command(text: str) -> Command:
    """
    Parse a text frame into a command.
    
    Unknown keys are ignored.
    
    Raises:
        ProtocolError: If the frame is not a valid command
    """
    try:
        data = json.loads(text)
        if not isinstance(data, dict):
            raise ValueError("expected a JSON object")
        return Command.from_dict(data)
    except (ValueError, RecursionError) as e:
        raise ProtocolError(f"Invalid command: {e}") from e
