from rich.pretty import pprint

from termina import *

__codes__ = {FaultCode.REQUIRED_PARAMS_NOT_FOUND: "E-USAGE"}

console = Console(
    [
        Command("help", override=True, help="show this help"),
        Command("print", ValueMode.REQUIRED, help="print a page"),
    ],
    [
        Option("-o|--output", ValueMode.REQUIRED, required=True, help="output file"),
        Option("-t|--tags", ValueMode.OPTIONAL | ValueMode.IS_ARRAY, help="comma separated tags"),
        Option("-v|--verbose", help="verbose output"),
    ],
    shell=True,
    fancy=True,
)


if __name__ == '__main__':
    console.validate()
    if console.has_command("help"):
        console.help()
    else:
        console.write(console.header(f"printing {console.get_command('print')}"))
        console.write(f"output: {console.get_option('--output')}", indent="  ")
        console.send()
        if console.get_option("--verbose"):
            pprint(console.request)
