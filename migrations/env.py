from logging.config import fileConfig

from sqlalchemy import engine_from_config
from sqlalchemy import pool

from alembic import context
from sqlmodel import SQLModel
from models.client import Client
from models.api_key import APIKey
from models.plan import Plan
from models.cohort import Cohort
from models.assessment_type import AssessmentType
from models.cohort_assessment import CohortAssessment
from models.assessment_definition import AssessmentDefinition
from models.assessment_step import AssessmentStep
from models.assessment_question import AssessmentQuestion
from models.participant_assessment import ParticipantAssessment
from models.external_reviewer import ExternalReviewer
from models.reviewer_nomination import ReviewerNomination
from models.response_session import ResponseSession
from models.assessment_response import AssessmentResponse
from models.assessment_report import AssessmentReport
from models.background_task import BackgroundTask
from config.settings import Settings

# this is the Alembic Config object, which provides
# access to the values within the .ini file in use.
config = context.config

# Interpret the config file for Python logging.
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

# Load settings from .env
settings = Settings()

# Metadata of every table model imported above, for 'autogenerate' support
target_metadata = SQLModel.metadata

# Tables owned by other services sharing the database; never autogenerate them
EXTERNAL_TABLES = {
    "client_users",
    "report_files",
}


def include_object(object, name, type_, reflected, compare_to):
    """Filter objects for autogenerate.

    Excludes tables that live in the same database but are managed elsewhere.
    """
    if type_ == "table" and name in EXTERNAL_TABLES:
        return False
    return True


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode.

    Configures the context with just a URL, so calls to context.execute()
    emit SQL to the script output instead of a live connection.
    """
    url = settings.DATABASE_URL or config.get_main_option("sqlalchemy.url")
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        include_object=include_object,
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Run migrations in 'online' mode against DATABASE_URL (or alembic.ini)."""
    url = settings.DATABASE_URL or config.get_main_option("sqlalchemy.url")

    configuration = config.get_section(config.config_ini_section, {})
    configuration["sqlalchemy.url"] = url

    connectable = engine_from_config(
        configuration,
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            include_object=include_object,
        )

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
