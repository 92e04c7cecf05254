"""pipelaunch command line - ``python -m pipelaunch``.

Launches a browser in pipe mode and relays messages between stdin/stdout
and the browser. See :mod:`pipelaunch.launcher_main` for the options.
"""

from pipelaunch.launcher_main import main

if __name__ == "__main__":
    main()
