"""
Tests for the session secret generator script.
"""

from dotenv import dotenv_values

from scripts.generate_secret_key import generate_secret_key, write_secret_key


def test_generate_secret_key_is_hex():
    key = generate_secret_key()
    assert len(key) == 64
    int(key, 16)


def test_write_adds_key_to_new_env_file(tmp_path, capsys):
    env_file = tmp_path / ".env"
    key = write_secret_key(env_file)

    assert dotenv_values(env_file)["JWT_SECRET_KEY"] == key
    assert "[init] Added JWT_SECRET_KEY" in capsys.readouterr().out


def test_write_rotates_existing_key_and_keeps_other_settings(tmp_path, capsys):
    env_file = tmp_path / ".env"
    env_file.write_text("DB_URI=sqlite:///portal.db\nJWT_SECRET_KEY=old\n")

    write_secret_key(env_file, key="new-key")

    values = dotenv_values(env_file)
    assert values["JWT_SECRET_KEY"] == "new-key"
    assert values["DB_URI"] == "sqlite:///portal.db"
    assert env_file.read_text().count("JWT_SECRET_KEY") == 1
    assert "[init] Rotated JWT_SECRET_KEY" in capsys.readouterr().out
