"""
Point d'entrée de l'API Drive Rent Hub
"""
from app_config import AppConfigurator
from constants import APP_NAME, APP_VERSION

# Créer l'application avec la configuration centralisée
app = AppConfigurator.create_app()


@app.get("/")
def root():
    """Point d'entrée de l'API"""
    return {
        "message": f"API {APP_NAME}",
        "version": APP_VERSION,
        "status": "active"
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
