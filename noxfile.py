import nox.sessions


nox.options.reuse_existing_virtualenvs = True
nox.options.sessions = ['tests', 'tests_sqlalchemy']


@nox.session(python=['3.8', '3.9', '3.10', '3.11', '3.12'])
def tests(session: nox.sessions.Session, sqlalchemy=None):
    """ Run all tests """
    session.install('-e', '.[test]')

    # Specific versions
    if sqlalchemy:
        session.install(f'sqlalchemy=={sqlalchemy}')

    # Test
    session.run('pytest', '-vv', 'tests/', '--cov=sa2packer')


@nox.session()
@nox.parametrize(
    'sqlalchemy',
    [
        '1.4.54',
        *(f'2.0.{x}' for x in (0, 10, 20, 30, 36)),
    ]
)
def tests_sqlalchemy(session, sqlalchemy):
    tests(session, sqlalchemy=sqlalchemy)
