"""Usage: python -m scannerkit [command] [options]"""

from scannerkit.cli.parser import main

if __name__ == "__main__":
    main()
