"""Tests for the directory client."""

from __future__ import annotations

from ldap3 import SIMPLE

from adauth.directory import AD_CONTROLLER, DIRECTORY, DirectoryClient, DirectoryConfig

from .support.ldap import MockLDAP

AD_BASE = "DC=ad,DC=colorado,DC=edu"
PEOPLE_BASE = "OU=people,DC=colorado,DC=edu"
STAFF = "CN=ASSETT-Staff,OU=Groups,DC=colorado,DC=edu"
DESIGN = "CN=ASSETT-Design,OU=Groups,DC=colorado,DC=edu"


def test_connect(mock_ldap: MockLDAP, directory_config: DirectoryConfig) -> None:
    client = DirectoryClient(directory_config, AD_CONTROLLER)

    assert client.connected
    assert not client.authenticated
    assert mock_ldap.servers[0]["host"] == "dc11.ad.colorado.edu"
    assert mock_ldap.servers[0]["port"] == 636
    assert mock_ldap.servers[0]["use_ssl"] is True
    assert mock_ldap.last.kwargs["version"] == 3
    assert mock_ldap.last.kwargs["auto_referrals"] is False
    mock_ldap.last.open.assert_called_once_with()


def test_connect_failure_is_recorded(mock_ldap: MockLDAP, directory_config: DirectoryConfig) -> None:
    mock_ldap.fail_connect = True

    client = DirectoryClient(directory_config, DIRECTORY)

    assert not client.connected
    assert client.error.startswith("Could not connect to active directory controller")
    assert not client.authenticate("jdoe", "secret")
    assert client.lookup_user("jdoe") == []


def test_unknown_endpoint(mock_ldap: MockLDAP, directory_config: DirectoryConfig) -> None:
    client = DirectoryClient(directory_config, "dc12")
    assert not client.connected
    assert "dc12" in client.error
    assert mock_ldap.connections == []


def test_authenticate(mock_ldap: MockLDAP, directory_config: DirectoryConfig) -> None:
    mock_ldap.add_user("AD\\jdoe", "secret")
    client = DirectoryClient(directory_config, AD_CONTROLLER)

    assert client.authenticate("jdoe", "secret")
    assert client.authenticated
    assert client.username == "jdoe"
    mock_ldap.last.bind.assert_called_once_with()
    assert mock_ldap.last.user == "AD\\jdoe"
    assert mock_ldap.last.password == "secret"
    assert mock_ldap.last.authentication == SIMPLE


def test_authenticate_bad_password(mock_ldap: MockLDAP, directory_config: DirectoryConfig) -> None:
    mock_ldap.add_user("AD\\jdoe", "secret")
    client = DirectoryClient(directory_config, AD_CONTROLLER)

    assert not client.authenticate("jdoe", "wrong")
    assert not client.authenticated
    assert client.errno == 49
    assert "invalidCredentials" in client.error


def test_authenticate_resets_flag(mock_ldap: MockLDAP, directory_config: DirectoryConfig) -> None:
    mock_ldap.add_user("AD\\jdoe", "secret")
    client = DirectoryClient(directory_config, AD_CONTROLLER)
    assert client.authenticate("jdoe", "secret")

    assert not client.authenticate("jdoe", "wrong")
    assert not client.authenticated


def test_empty_password_never_binds(mock_ldap: MockLDAP, directory_config: DirectoryConfig) -> None:
    client = DirectoryClient(directory_config, AD_CONTROLLER)

    assert not client.authenticate("jdoe", "")
    mock_ldap.last.bind.assert_not_called()


def test_bind_anonymous(mock_ldap: MockLDAP, directory_config: DirectoryConfig) -> None:
    client = DirectoryClient(directory_config, DIRECTORY)

    assert client.bind_anonymous()
    assert client.authenticated
    mock_ldap.last.bind.assert_called_once_with()


def test_change_endpoint(mock_ldap: MockLDAP, directory_config: DirectoryConfig) -> None:
    mock_ldap.add_user("AD\\jdoe", "secret")
    client = DirectoryClient(directory_config, AD_CONTROLLER)
    assert client.authenticate("jdoe", "secret")
    first = mock_ldap.last

    assert client.change_endpoint(DIRECTORY)

    first.unbind.assert_called_once_with()
    assert client.connected
    assert not client.authenticated
    assert client.endpoint_name == DIRECTORY
    assert client.conn is mock_ldap.last
    assert client.conn is not first
    assert mock_ldap.servers[-1]["host"] == "directory.colorado.edu"


def test_close(mock_ldap: MockLDAP, directory_config: DirectoryConfig) -> None:
    mock_ldap.add_user("AD\\jdoe", "secret")
    client = DirectoryClient(directory_config, AD_CONTROLLER)
    client.authenticate("jdoe", "secret")

    client.close()

    assert not client.connected
    assert not client.authenticated
    mock_ldap.last.unbind.assert_called_once_with()


def test_lookup_user_per_endpoint(mock_ldap: MockLDAP, directory_config: DirectoryConfig) -> None:
    mock_ldap.add_entries(AD_BASE, "(CN=jdoe)", [("CN=jdoe,OU=People," + AD_BASE, {"mail": ["jdoe@ad"]})])
    mock_ldap.add_entries(PEOPLE_BASE, "(uid=jdoe)", [("uid=jdoe," + PEOPLE_BASE, {"mail": ["jane.doe@colorado.edu"]})])

    ad = DirectoryClient(directory_config, AD_CONTROLLER)
    directory = DirectoryClient(directory_config, DIRECTORY)

    assert [e.mail for e in ad.lookup_user("jdoe")] == ["jdoe@ad"]
    assert [e.mail for e in directory.lookup_user("jdoe")] == ["jane.doe@colorado.edu"]


def test_lookup_user_defaults_to_bound_user(mock_ldap: MockLDAP, directory_config: DirectoryConfig) -> None:
    mock_ldap.add_user("AD\\jdoe", "secret")
    mock_ldap.add_entries(AD_BASE, "(CN=jdoe)", [("CN=jdoe," + AD_BASE, {"sn": ["Doe"]})])
    client = DirectoryClient(directory_config, AD_CONTROLLER)

    assert client.lookup_user() == []
    client.authenticate("jdoe", "secret")
    assert [e.surname for e in client.lookup_user()] == ["Doe"]


def test_lookup_user_escapes_filter(mock_ldap: MockLDAP, directory_config: DirectoryConfig) -> None:
    client = DirectoryClient(directory_config, DIRECTORY)

    assert client.lookup_user("*)(uid=*") == []
    kwargs = mock_ldap.last.search.call_args.kwargs
    assert kwargs["search_filter"] == "(uid=\\2a\\29\\28uid=\\2a)"
    assert kwargs["search_base"] == PEOPLE_BASE
    assert "memberof" in kwargs["attributes"]


def test_free_lookups(mock_ldap: MockLDAP, directory_config: DirectoryConfig) -> None:
    entry = ("uid=jdoe," + PEOPLE_BASE, {"displayName": ["Jane Doe"], "cuEduPersonUUID": ["123"]})
    mock_ldap.add_entries(PEOPLE_BASE, "(cn=Jane Doe)", [entry])
    mock_ldap.add_entries(PEOPLE_BASE, "(cuedupersonuuid=123)", [entry])
    mock_ldap.add_entries(PEOPLE_BASE, "(displayname=Jane *)", [entry])
    client = DirectoryClient(directory_config, DIRECTORY)

    assert [e.uuid for e in client.lookup_user_by_name("Jane Doe")] == ["123"]
    assert [e.display_name for e in client.lookup_user_by_id("123")] == ["Jane Doe"]
    assert [e.dn for e in client.lookup_user_by_relative_name("Jane")] == ["uid=jdoe," + PEOPLE_BASE]
    assert client.error == ""


def test_free_lookups_need_directory_endpoint(mock_ldap: MockLDAP, directory_config: DirectoryConfig) -> None:
    client = DirectoryClient(directory_config, AD_CONTROLLER)

    assert client.lookup_user_by_name("Jane Doe") == []
    assert 'must be the "Directory"' in client.error
    assert client.lookup_user_by_id("123") == []
    assert client.lookup_user_by_relative_name("Jane") == []
    mock_ldap.last.search.assert_not_called()


def test_free_lookups_preconditions(mock_ldap: MockLDAP, directory_config: DirectoryConfig) -> None:
    client = DirectoryClient(directory_config, DIRECTORY)

    assert client.lookup_user_by_name("") == []
    assert "Name parameter cannot be empty." in client.error
    assert client.lookup_user_by_id("") == []
    assert "UUID parameter cannot be empty." in client.error

    client.close()
    assert client.lookup_user_by_name("Jane Doe") == []
    assert "The ldap connection is not active." in client.error


def test_memberships(mock_ldap: MockLDAP, directory_config: DirectoryConfig) -> None:
    mock_ldap.add_user("AD\\jdoe", "secret")
    mock_ldap.add_entries(AD_BASE, "(CN=jdoe)", [("CN=jdoe," + AD_BASE, {"memberOf": [STAFF, DESIGN]})])
    client = DirectoryClient(directory_config, AD_CONTROLLER)
    client.authenticate("jdoe", "secret")

    groups = client.get_memberships()

    assert [(g.cn, g.ou) for g in groups] == [
        ("ASSETT-Staff", "Groups,DC=colorado,DC=edu"),
        ("ASSETT-Design", "Groups,DC=colorado,DC=edu"),
    ]
    assert client.is_member("ASSETT-Design")
    assert not client.is_member("ASSETT")
    assert client.is_member_matching(r"^ASSETT-.*gn$")
    assert not client.is_member_matching(r"-Admins$")
    # The entry is fetched once per client.
    assert mock_ldap.last.search.call_count == 1


def test_memberships_from_threaded_entry(mock_ldap: MockLDAP, directory_config: DirectoryConfig) -> None:
    mock_ldap.add_entries(AD_BASE, "(CN=jdoe)", [("CN=jdoe," + AD_BASE, {"memberOf": [STAFF]})])
    client = DirectoryClient(directory_config, AD_CONTROLLER)
    entry = client.lookup_user("jdoe")[0]

    assert client.is_member("ASSETT-Staff", entry)
    assert client.get_memberships() == []


def test_is_member_matching_bad_pattern(mock_ldap: MockLDAP, directory_config: DirectoryConfig) -> None:
    mock_ldap.add_entries(AD_BASE, "(CN=jdoe)", [("CN=jdoe," + AD_BASE, {"memberOf": [STAFF]})])
    client = DirectoryClient(directory_config, AD_CONTROLLER)
    entry = client.lookup_user("jdoe")[0]

    assert not client.is_member_matching("ASSETT-(", entry)
    assert client.error.startswith("Invalid group pattern 'ASSETT-('")


def test_missing_entry_is_looked_up_once(mock_ldap: MockLDAP, directory_config: DirectoryConfig) -> None:
    mock_ldap.add_user("AD\\jdoe", "secret")
    client = DirectoryClient(directory_config, AD_CONTROLLER)
    client.authenticate("jdoe", "secret")

    assert client.get_memberships() == []
    assert not client.is_member("ASSETT-Staff")
    assert not client.is_member_matching("^ASSETT-")
    assert mock_ldap.last.search.call_count == 1
