import sys
import signal
from rich.console import Console

from folio.app import main

console = Console()

# -----------------------------------------------------------------------------
# CTRL+C HANDLING
# -----------------------------------------------------------------------------

def signal_handler(sig, frame):
    console.print("\n[yellow]⚠️  Force Quit Detected. Bye![/yellow]")
    sys.exit(130)

signal.signal(signal.SIGINT, signal_handler)

if __name__ == "__main__":
    sys.exit(main())
