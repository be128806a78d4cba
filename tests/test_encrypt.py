from envcoder.envfile import EnvFile

from conftest import PASSWORD


def test_encrypt_with_password_in_file(invoke, env: EnvFile):
    env.plaintext.write_text("VAR1=TEST\nVAR2=TEST2\nENV_PASSWORD=password\n")

    output = invoke(['encrypt'])

    assert output[0].startswith("Encrypted")
    assert env.encrypted.exists()
    assert env.contents(PASSWORD) == "VAR1=TEST\nVAR2=TEST2\n"


def test_encrypt_asks_for_password(invoke, env: EnvFile):
    env.plaintext.write_text("VAR1=TEST\nVAR2=TEST2\n")

    output = invoke(['encrypt'], input='password\n')

    assert "Enter encryption key to encode .env" in output[0]
    assert env.contents(PASSWORD) == "VAR1=TEST\nVAR2=TEST2\n"


def test_encrypt_password_option(invoke, env: EnvFile):
    env.plaintext.write_text("VAR1=TEST\n")
    invoke(['encrypt', '--password', 'other'])
    assert env.contents('other') == "VAR1=TEST\n"


def test_encrypt_password_environment(invoke, env: EnvFile, monkeypatch):
    monkeypatch.setenv('ENVCODER_PASSWORD', 'from-env')
    env.plaintext.write_text("VAR1=TEST\n")
    invoke(['encrypt'])
    assert env.contents('from-env') == "VAR1=TEST\n"


def test_encrypt_skips_unchanged(invoke, env: EnvFile):
    env.plaintext.write_text("VAR1=TEST\n")
    invoke(['encrypt', '--password', PASSWORD])
    output = invoke(['encrypt', '--password', PASSWORD])
    assert output[0].startswith("Skipping")


def test_encrypt_force(invoke, env: EnvFile):
    env.plaintext.write_text("VAR1=TEST\n")
    invoke(['encrypt', '--password', PASSWORD])
    output = invoke(['encrypt', '--password', PASSWORD, '--force'])
    assert output[0].startswith("Encrypted")


def test_encrypt_missing_plaintext(invoke, env: EnvFile):
    invoke(['encrypt', '--password', PASSWORD], exit_code=1)
    assert not env.encrypted.exists()


def test_encrypt_malformed_plaintext(invoke, env: EnvFile):
    env.plaintext.write_text("VAR1=TEST\nBROKEN\n")
    output = invoke(['encrypt', '--password', PASSWORD], exit_code=1)
    assert "Line 2" in output[-1]
    assert not env.encrypted.exists()


def test_encrypt_custom_file_names(invoke, directory):
    env = EnvFile.in_directory(directory, '.env.production', 'production.enc')
    env.plaintext.write_text("VAR1=TEST\n")

    invoke(['-e', '.env.production', '-o', 'production.enc', 'encrypt', '--password', PASSWORD])

    assert env.contents(PASSWORD) == "VAR1=TEST\n"


def test_encrypt_new_password_suggests_force(invoke, env: EnvFile):
    env.plaintext.write_text("VAR1=TEST\n")
    invoke(['encrypt', '--password', 'old'])

    output = invoke(['encrypt', '--password', 'new'], exit_code=1)
    assert '--force' in output[-1]

    invoke(['encrypt', '--password', 'new', '--force'])
    assert env.contents('new') == "VAR1=TEST\n"
