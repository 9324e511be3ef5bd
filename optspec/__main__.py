"""
Command line playground for optspec.

    python -m optspec --spec=SPEC [--spec=SPEC ...] [--mode=MODE] [-i|--ignore-case]
                      [-l|--lenient] [-v|--verbose] -- ARGS...

Every SPEC is declared in order, ARGS are matched against them, and the result is
pretty-printed. Faults are rendered on stderr and the process exits with status 1.
"""
import logging
import sys

from rich.console import Console
from rich.logging import RichHandler
from rich.pretty import pprint

from . import InputMode, OptionsFault, Registry, match, trigger

__prog__ = "optspec"

stderr = Console(stderr=True)


def _playground():
    registry = Registry()
    registry.option("--spec*=[s]")
    registry.option("--mode=s")
    registry.option("-i|--ignore-case")
    registry.option("-l|--lenient")
    registry.option("-v|--verbose")
    return registry.freeze()


def main(argv=None, /):
    argv = sys.argv[1:] if argv is None else list(argv)
    try:
        cut = argv.index("--")
    except ValueError:
        cut = len(argv)
    own, args = argv[:cut], argv[cut + 1:]

    try:
        options = match(own, _playground())
        if options.has("verbose"):
            logging.basicConfig(
                level=logging.DEBUG,
                format="%(message)s",
                handlers=[RichHandler(console=stderr, show_path=False)],
            )

        registry = Registry(
            case_sensitive=not options.has("ignore-case"),
            mode=InputMode(options.value("mode", InputMode.STANDARD.value)),
            error_on_unknown=not options.has("lenient"),
        )
        for spec in options.values("spec"):
            registry.option(spec)

        result = match([*options.positionals, *args], registry.freeze())
    except OptionsFault as fault:
        trigger(fault, shell=True, fancy=True, prog=__prog__)
    except ValueError as error:
        stderr.print("[bold red]%s:[/] %s" % (__prog__, error))
        return 2

    pprint(result, expand_all=True)
    return 0


if __name__ == "__main__":
    sys.exit(main())
