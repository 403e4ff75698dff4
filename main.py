from app import create_app

# --- WSGI entrypoint ---
app = create_app()


if __name__ == "__main__":
    app.run(host="0.0.0.0", port=8000)
