from actorgen.cli.app import app


def run() -> None:
    app()


if __name__ == "__main__":
    run()
