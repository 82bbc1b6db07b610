"""
Seed the default runners.
Registers the bash and python wrappers used by scripts that do not bring their own runner.
"""
import asyncio

from runcake.domain.catalog import CatalogService
from runcake.infrastructure.database import init_db, session_scope
from runcake.infrastructure.database.repositories import SqlCatalogRepository

DEFAULT_RUNNERS = [
    {
        "name": "bash",
        "description": "Runs the script body with bash in strict mode",
        "wrapper": "#!/bin/bash\nset -euo pipefail\n\n{{SCRIPT_CONTENT}}\n",
    },
    {
        "name": "python",
        "description": "Feeds the script body to python3 through a heredoc",
        "wrapper": "#!/bin/bash\nset -euo pipefail\n\npython3 - <<'RUNCAKE_PY'\n{{SCRIPT_CONTENT}}\nRUNCAKE_PY\n",
    },
]


async def create_default_runners():
    """Register every default runner that is not stored yet."""
    await init_db()

    async with session_scope() as db:
        repository = SqlCatalogRepository(db)
        service = CatalogService(repository)

        for runner in DEFAULT_RUNNERS:
            if await repository.get_runner_by_name(runner["name"]) is not None:
                print(f"Runner {runner['name']} already exists, skipping")
                continue
            created = await service.register_runner(**runner)
            print(f"Runner {created.name} created ({created.id})")


if __name__ == "__main__":
    asyncio.run(create_default_runners())
