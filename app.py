from src.eventflow.eventflow.main import create_app

app = create_app()

if __name__ == "__main__":
    # threaded so change-feed refreshes do not block request handling
    app.run(debug=app.config.get("DEBUG", False), threaded=True, use_reloader=False)
