"""Shared fixtures for tests."""

from pathlib import Path

import pytest

from archgen.graph.models import Diagram, DiagramMetadata, Edge, Node

USER_SERVICE_TS = """import { UserRepository } from '../repositories/userRepository';
import { formatName } from '../utils/format';
import axios from 'axios';

export interface UserService extends BaseService { getUser(id: string): User; }

export class DefaultUserService extends BaseService implements UserService {
  private repo: UserRepository;

  getUser(id: string): User {
    return this.repo.find(id);
  }
}

export function createUserService(repo: UserRepository): UserService {
  return new DefaultUserService(repo);
}
"""

USER_REPOSITORY_TS = """export class UserRepository {
  find(id: string) {
    return null;
  }
}
"""

FORMAT_TS = """export const formatName = (name: string): string => name.trim();
"""


@pytest.fixture
def sample_repo(tmp_path: Path) -> Path:
    """Return a small TypeScript tree with excluded directories."""
    root = tmp_path / "repo"
    files = {
        "src/services/userService.ts": USER_SERVICE_TS,
        "src/repositories/userRepository.ts": USER_REPOSITORY_TS,
        "src/utils/format.ts": FORMAT_TS,
        "README.md": "# Sample\n",
        "node_modules/lib/index.js": "module.exports = Lib;\n",
        "dist/bundle.js": "console.log('built');\n",
        ".git/HEAD": "ref: refs/heads/main\n",
    }
    for rel_path, content in files.items():
        path = root / rel_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
    return root


@pytest.fixture
def small_diagram() -> Diagram:
    """Return a three-node diagram with one dangling edge."""
    return Diagram(
        nodes=[
            Node(id="src/app.ts", label="app.ts", type="service"),
            Node(id="src/app.ts#App", label="App", type="class"),
            Node(id="src/db.ts", label="db.ts", type="database"),
        ],
        edges=[
            Edge(source="src/app.ts", target="src/app.ts#App", type="contains", label="contains"),
            Edge(source="src/app.ts", target="src/db.ts", type="depends", label="imports"),
            Edge(source="src/app.ts", target="src/missing", type="depends", label="imports"),
        ],
        metadata=DiagramMetadata(
            repository="acme/app", generated_at="2024-01-01T00:00:00+00:00"
        ),
    )


@pytest.fixture
def user_service_source() -> str:
    """Return a TypeScript service with an interface, class and function."""
    return USER_SERVICE_TS


@pytest.fixture
def format_source() -> str:
    """Return a TypeScript module with one arrow function."""
    return FORMAT_TS
