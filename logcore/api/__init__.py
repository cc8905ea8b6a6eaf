"""HTTP surface: the analysis workflow exposed as a FastAPI router."""
