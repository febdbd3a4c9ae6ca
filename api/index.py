from landrental import create_app

# Serverless entry point for the Land Rental API
app = create_app()

if __name__ == "__main__":
    app.run()
