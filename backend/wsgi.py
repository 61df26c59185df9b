from posadmin import create_app

app = create_app()
