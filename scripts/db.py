"""Database management script for the derived read model."""

import argparse

import alembic.config


def _alembic(*argv):
    alembic.config.main(argv=['--raiseerr', *argv])


def run_migrations(args):
    """Upgrade the schema to a revision (head by default)."""
    _alembic('upgrade', args.revision)


def rollback_migrations(args):
    """Downgrade the schema by one revision or to a given one."""
    _alembic('downgrade', args.revision)


def show_current(args):
    """Show the revision the database is at."""
    _alembic('current')


def create_migration(args):
    """Autogenerate a migration from the table models."""
    _alembic('revision', '--autogenerate', '-m', args.message or "migration")


def main():
    parser = argparse.ArgumentParser(description="Database management commands")
    subparsers = parser.add_subparsers(dest='command')

    migrate_parser = subparsers.add_parser('migrate', help='Run migrations')
    migrate_parser.add_argument('--revision', default='head', help='Target revision')
    migrate_parser.set_defaults(func=run_migrations)

    rollback_parser = subparsers.add_parser('rollback', help='Rollback migrations')
    rollback_parser.add_argument('--revision', default='-1', help='Target revision')
    rollback_parser.set_defaults(func=rollback_migrations)

    current_parser = subparsers.add_parser('current', help='Show current revision')
    current_parser.set_defaults(func=show_current)

    create_parser = subparsers.add_parser('create', help='Create new migration')
    create_parser.add_argument('--message', '-m', help='Migration message')
    create_parser.set_defaults(func=create_migration)

    args = parser.parse_args()
    if hasattr(args, 'func'):
        args.func(args)
    else:
        parser.print_help()


if __name__ == '__main__':
    main()
