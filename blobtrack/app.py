from blobtrack.core.config_loader import load_config
from blobtrack.core.logging import configure_logging
from blobtrack.simulation.session import build_session_from_config


def main() -> None:
    config = load_config()
    configure_logging(config.get("settings", {}).get("logging", {}).get("level"))
    session = build_session_from_config(config)
    session.run()


if __name__ == "__main__":
    main()
