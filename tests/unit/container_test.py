from orchestriq.container import Container
from orchestriq.container import CreatedContainer
from orchestriq.container import get_container_name
from tests import unittest


class ContainerTest(unittest.TestCase):
    def setUp(self):
        self.container_id = "abcabcabcbabc12345"
        self.container_dict = {
            "Id": self.container_id,
            "Image": "busybox:latest",
            "Command": "top",
            "Created": 1387384730,
            "Status": "Up 8 seconds",
            "State": "running",
            "Ports": [
                {"PrivatePort": 80, "PublicPort": 8080, "Type": "tcp", "IP": "0.0.0.0"},
                {"PrivatePort": 53, "Type": "udp"},
            ],
            "SizeRw": 0,
            "SizeRootFs": 0,
            "Names": ["/shop_web"],
            "Labels": {"com.example.tier": "frontend"},
            "Mounts": [{"Type": "volume", "Name": "data", "Destination": "/data"}],
        }

    def test_from_ps(self):
        container = Container.from_ps(self.container_dict)
        assert container.id == self.container_id
        assert container.short_id == 'abcabcabcbab'
        assert container.name == 'shop_web'
        assert container.names == ['shop_web']
        assert container.image == 'busybox:latest'
        assert container.state == 'running'
        assert container.status == 'Up 8 seconds'
        assert container.labels == {'com.example.tier': 'frontend'}
        assert container.mounts[0]['Name'] == 'data'
        assert container.is_running

    def test_human_readable_ports(self):
        container = Container.from_ps(self.container_dict)
        assert container.human_readable_ports == '0.0.0.0:8080->80/tcp, 53/udp'

    def test_human_readable_ports_none(self):
        self.container_dict['Ports'] = []
        assert Container.from_ps(self.container_dict).human_readable_ports == ''

    def test_get(self):
        container = Container({
            "Status": "Up 8 seconds",
            "HostConfig": {
                "VolumesFrom": ["volume_id"]
            },
        })

        assert container.get('Status') == "Up 8 seconds"
        assert container.get('HostConfig.VolumesFrom') == ["volume_id"]
        assert container.get('Foo.Bar.DoesNotExist') is None

    def test_equality(self):
        assert Container.from_ps(self.container_dict) == Container.from_ps(dict(self.container_dict))
        assert Container.from_ps(self.container_dict) != self.container_dict

    def test_get_container_name(self):
        assert get_container_name({}) is None
        assert get_container_name({'Name': 'myproject_db_1'}) == 'myproject_db_1'
        assert get_container_name(
            {'Names': ['/swarm-host-1/myproject_db_1', '/swarm-host-1/myproject_web_1/db']}
        ) == 'myproject_db_1'

    def test_created_container(self):
        created = CreatedContainer('0123456789abcdef', 'web')
        assert created.short_id == '0123456789ab'
        assert created.name == 'web'
