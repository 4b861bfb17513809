"""Entry point for running as module: python -m routewatch"""

from routewatch.main import main

if __name__ == "__main__":
    main()
