from cellscript.cli.cmd import cli as cli
from cellscript.cli.cmd import main as main
