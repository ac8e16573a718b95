"""HTTP route modules, one APIRouter each. Mounted under /api by api.main.create_app()."""
