"""
Client registry (clients/registry.py)
"""

import pytest

from aquilauth.clients import Clients
from aquilauth.config import ClientsConfig
from aquilauth.faults import CLIENT_CONFIG_INVALID, CLIENT_NAME_MISSING, CLIENT_NOT_FOUND

from conftest import OAuthLikeClient, SamlLikeClient, build_client, make_context


class TestClients:

    def test_get_by_name(self, clients, indirect_client):
        assert clients.get("saml") is indirect_client

    def test_get_default(self, clients, direct_client):
        assert clients.get() is direct_client

    def test_get_unknown(self, clients):
        with pytest.raises(CLIENT_NOT_FOUND) as exc_info:
            clients.get("github")
        assert exc_info.value.metadata["client_name"] == "github"

    def test_get_without_default(self):
        registry = Clients([build_client(OAuthLikeClient, "a"), build_client(OAuthLikeClient, "b")])
        with pytest.raises(CLIENT_NOT_FOUND):
            registry.get()

    def test_single_client_is_implicit_default(self, direct_client):
        registry = Clients([direct_client])
        assert registry.default == "oauth"
        assert registry.get() is direct_client

        context, _ = make_context("/callback", "code=good-code")
        assert registry.find(context) is direct_client

    def test_duplicate_names(self):
        with pytest.raises(CLIENT_CONFIG_INVALID):
            Clients([build_client(OAuthLikeClient, "a"), build_client(OAuthLikeClient, "a")])

    def test_unknown_default(self, direct_client):
        with pytest.raises(CLIENT_CONFIG_INVALID):
            Clients([direct_client], default="other")

    def test_find_from_request(self, clients, cas_client):
        context, _ = make_context("/callback", "client_name=cas&ticket=ST-1")
        assert clients.find(context) is cas_client

    def test_find_falls_back_to_default(self, clients, direct_client):
        context, _ = make_context("/callback", "code=x")
        assert clients.find(context) is direct_client

    def test_find_without_name_or_default(self):
        registry = Clients([build_client(OAuthLikeClient, "a"), build_client(OAuthLikeClient, "b")])
        context, _ = make_context("/callback")
        with pytest.raises(CLIENT_NAME_MISSING):
            registry.find(context)

    def test_find_unknown(self, clients):
        context, _ = make_context("/callback", "client_name=nope")
        with pytest.raises(CLIENT_NOT_FOUND):
            clients.find(context)

    def test_custom_parameter(self):
        client = build_client(OAuthLikeClient, "oauth", client_name_parameter="provider")
        registry = Clients([client], client_name_parameter="provider")
        context, _ = make_context("/callback", "provider=oauth")
        assert registry.find(context) is client

    def test_rejects_client_tagging_other_parameter(self):
        client = build_client(OAuthLikeClient, "oauth", client_name_parameter="cn")
        with pytest.raises(CLIENT_CONFIG_INVALID) as exc_info:
            Clients([client])
        assert exc_info.value.metadata["client_name"] == "oauth"

    def test_from_config(self):
        config = ClientsConfig(client_name_parameter="cn")
        oauth = build_client(OAuthLikeClient, "oauth", **config.client_options())
        saml = build_client(SamlLikeClient, "saml", **config.client_options())
        registry = Clients.from_config([oauth, saml], config)

        assert registry.client_name_parameter == "cn"
        context, _ = make_context("/callback", "cn=saml")
        assert registry.find(context) is saml

    def test_collection_protocol(self, clients):
        assert clients.names == ["oauth", "saml", "cas", "basic"]
        assert len(clients) == 4
        assert "cas" in clients
        assert "github" not in clients
        assert [c.name for c in clients] == clients.names
        assert repr(clients) == "Clients(['oauth', 'saml', 'cas', 'basic'])"
