from testboard.api import create_app

app = create_app()
