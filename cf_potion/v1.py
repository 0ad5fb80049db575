"""
Resource types of the legacy v1 API: flat attribute maps identified by one of their own attributes.
"""
from . import Api, fields
from .manager import FlatManager
from .resource import Resource

api = Api(title='v1')


class Model(Resource):
    class Meta:
        manager = FlatManager


class App(Model):
    class Schema:
        name = fields.String(identity=True, required=True)
        instances = fields.Integer(minimum=0, default=1)
        state = fields.String(enum=['STOPPED', 'STARTED'], default='STOPPED')
        created = fields.Integer(io='r', attribute='meta.created')
        version = fields.Integer(io='r', attribute='meta.version')
        framework = fields.String(attribute='staging.model')
        runtime = fields.String(attribute='staging.stack')
        command = fields.String(attribute='staging.command', nullable=True)
        memory = fields.PositiveInteger(attribute='resources.memory', default=256)
        disk = fields.PositiveInteger(attribute='resources.disk', default=2048)
        fds = fields.PositiveInteger(attribute='resources.fds', default=256)
        env = fields.Array(fields.String)
        uris = fields.Array(fields.String)
        services = fields.Array(fields.String)
        console = fields.Boolean(default=False, read='meta.console', write='console')
        debug = fields.String(nullable=True, read='meta.debug', write='debug')
        running_instances = fields.Integer(io='r', read='runningInstances')


class Service(Model):
    class Schema:
        name = fields.String(identity=True, required=True)
        type = fields.String()
        vendor = fields.String()
        version = fields.String()
        tier = fields.String(default='free')
        properties = fields.Object()
        tags = fields.Array(fields.String)
        created = fields.Integer(io='r', attribute='meta.created')
        updated = fields.Integer(io='r', attribute='meta.updated')


class User(Model):
    class Schema:
        email = fields.Email(identity=True, required=True)
        admin = fields.Boolean(default=False)
        password = fields.String(io='w')

    class Meta:
        read_only_fields = ('admin',)


for resource in (App, Service, User):
    api.add_resource(resource)
