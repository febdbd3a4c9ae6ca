from landrental import create_app

# WSGI entry point; servers look for the 'app' variable in this file
app = create_app()

if __name__ == "__main__":
    app.run()
