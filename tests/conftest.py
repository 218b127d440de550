"""
Shared pytest fixtures for solid-lens tests.
"""

import shutil
import tempfile
import textwrap
from pathlib import Path

import pytest

from solid_lens.core.config import SolidLensConfig
from solid_lens.core.extractor import StructuralExtractor


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    temp_path = Path(tempfile.mkdtemp())
    yield temp_path
    shutil.rmtree(temp_path)


@pytest.fixture
def extractor():
    """Create a StructuralExtractor instance for testing."""
    return StructuralExtractor()


@pytest.fixture
def default_config(temp_dir):
    """Configuration rooted at the temporary directory with semgrep disabled."""
    return SolidLensConfig(project_root=str(temp_dir), watch_directories=[str(temp_dir)], semgrep_enabled=False)


@pytest.fixture
def python_split_class():
    """Python class with two groups of methods that never touch each other's state."""
    return textwrap.dedent("""\
        class UserManager:
            def __init__(self, db):
                self.db = db
                self.cache = {}

            def get_user(self, user_id):
                return self.db.find(user_id)

            def save_user(self, user):
                self.db.save(user)

            def send_email(self, address):
                self.smtp.send(address)

            def format_email(self, body):
                return self.template.render(body)

            def notify(self, address, body):
                self.send_email(address)
                self.format_email(body)
        """)


@pytest.fixture
def python_type_switch():
    """Python method dispatching on concrete types and a type field."""
    return textwrap.dedent("""\
        class AreaCalculator:
            def area(self, shape):
                if isinstance(shape, Circle):
                    return 3.14 * shape.r * shape.r
                elif isinstance(shape, Square):
                    return shape.side * shape.side
                if shape.kind == "triangle":
                    return shape.base * shape.height / 2
                return 0
        """)


@pytest.fixture
def python_dip_violator():
    """Python class creating its own collaborators."""
    return textwrap.dedent("""\
        class ReportService:
            def __init__(self):
                self.db = Database()
                self.mailer = Mailer()

            def send(self):
                formatter = Formatter()
                return formatter.render(self.db, self.mailer)
        """)


@pytest.fixture
def python_fat_interface():
    """Python ABC with six abstract methods and a partial implementation."""
    return textwrap.dedent("""\
        from abc import ABC, abstractmethod


        class Worker(ABC):
            @abstractmethod
            def work(self): ...

            @abstractmethod
            def eat(self): ...

            @abstractmethod
            def sleep(self): ...

            @abstractmethod
            def report(self): ...

            @abstractmethod
            def train(self): ...

            @abstractmethod
            def commute(self): ...


        class Robot(Worker):
            def work(self):
                return "working"

            def eat(self):
                pass

            def sleep(self):
                raise NotImplementedError("robots do not sleep")

            def report(self):
                return "ok"
        """)


@pytest.fixture
def typescript_service():
    """TypeScript service with an injected and a self-created dependency."""
    return textwrap.dedent("""\
        export class OrderService {
          private total: number = 0;

          constructor(private repo: OrderRepository) {
            this.logger = new ConsoleLogger();
          }

          load(id: string) {
            return this.repo.find(id);
          }

          add(amount: number) {
            this.total += amount;
            this.logger.log(this.total);
          }
        }
        """)
