import os

import modal
from modal import App, Image, asgi_app

from decision_tracker.config import Settings

# Define the volume for persistent database storage
volume = modal.Volume.from_name("decision-tracker-volume", create_if_missing=True)

image = (
    Image.debian_slim()
    .pip_install_from_pyproject("./pyproject.toml")
    .add_local_python_source("decision_tracker")
)
app = App("decision-tracker", image=image)


def modal_settings():
    settings = Settings()
    if "MODAL_TASK_ID" in os.environ and "DATABASE_URL" not in os.environ:
        # Use the volume path when running on Modal
        settings = settings.model_copy(
            update={"database_url": "sqlite:////data/decision_tracker.db"}
        )
    return settings


@app.function(
    image=image,
    volumes={"/data": volume},  # Mount the volume to /data
    secrets=[
        modal.Secret.from_name("openai-key"),
        modal.Secret.from_name("perplexity-key"),
    ],
)
@asgi_app()
def fastapi_app():
    from decision_tracker.main import create_app

    return create_app(modal_settings())
