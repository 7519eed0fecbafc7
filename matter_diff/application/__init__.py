# Application layer: services that orchestrate domain and infrastructure.
# Submodules are imported directly; infrastructure depends on application.exceptions.
