import sys

from rich.pretty import pprint

from camdo import *
from camdo.logs import configure

dispatcher = Dispatcher(shell=True, fancy=True)


@dispatcher.argtype("small_size")
def small_size(raw):
    """at most four characters"""
    return len(raw) < 5


@dispatcher.command("echo", args=[{"id": "sentence", "type": "small_size", "capture": True}])
def echo(bound):
    """Echo what you say!"""
    return {"title": "echo", "description": bound[0], "color": 0x555555}


@dispatcher.command("default-value", args=[{"id": "arg-1", "default_value": "default value!"}])
def default_value(bound):
    return {"title": "default-value", "description": bound[0]}


if __name__ == '__main__':
    configure("DEBUG" if "--debug" in sys.argv else "WARNING")
    for line in sys.stdin:
        dispatcher.dispatch(line, pprint)
