"""Application entry point for Note Maker backend server."""

from notemaker.app import App
from notemaker.config import Config
from notemaker.logging import setup_logging
from notemaker.web.runner import run_server


def main() -> None:
    config = Config()
    setup_logging(config.debug)
    app = App(config)
    run_server(app, config)


if __name__ == "__main__":
    main()
