"""Run the API server: ``python -m chroma_admin``."""

from chroma_admin.api.app import run

if __name__ == "__main__":
    run()
