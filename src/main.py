from src.app import AppSettings, bootstrap

__all__ = ["main"]


def main() -> None:
    """Apply database migrations so the review workflow can start against an up-to-date schema."""
    settings = AppSettings.from_env()
    bootstrap(settings)


if __name__ == "__main__":
    main()
