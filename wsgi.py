from app.main import app as application

# This 'application' object is what ASGI servers look for
if __name__ == "__main__":
    import uvicorn
    uvicorn.run("app.main:app", host="0.0.0.0", port=8000)
