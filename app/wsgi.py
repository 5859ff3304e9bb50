from app.linog import create_app

app = create_app()
