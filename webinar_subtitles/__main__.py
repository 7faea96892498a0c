"""Package entry point for ``python -m webinar_subtitles``.

Delegates to the CLI's main(), which handles the ``generate``, ``logs``
and ``serve`` subcommands.
"""

from webinar_subtitles.cli import main

if __name__ == "__main__":
    main()
