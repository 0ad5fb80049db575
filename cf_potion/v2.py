"""
Resource types of the v2 API, where every object is wrapped in a ``metadata``/``entity`` envelope.
"""
from . import Api, fields
from .exceptions import StaleReference
from .resource import Resource

api = Api(prefix='/v2', title='v2')


class Model(Resource):
    class Schema:
        created_at = fields.DateTimeString(io='r', read='metadata.created_at', absolute=True)
        updated_at = fields.DateTimeString(io='r', read='metadata.updated_at', absolute=True, nullable=True)


class App(Model):
    class Schema:
        name = fields.String(required=True)
        production = fields.Boolean(default=False)
        space = fields.ToOne('space')
        runtime = fields.ToOne('runtime')
        framework = fields.ToOne('framework')
        environment_json = fields.Object()
        memory = fields.PositiveInteger(default=256)
        instances = fields.Integer(minimum=0, default=1)
        file_descriptors = fields.PositiveInteger(default=256)
        disk_quota = fields.PositiveInteger(default=256)
        state = fields.String(enum=['STOPPED', 'STARTED'], default='STOPPED')
        command = fields.String(nullable=True)
        console = fields.Boolean(default=False)
        service_bindings = fields.ToMany('service_binding')
        routes = fields.ToMany('route')

    def upload(self, fileobj, resources=()):
        """
        Upload the zipped application bits.

        :param fileobj: file-like object with the zip file
        :param resources: fingerprints of files the target already has
        """
        if self.guid is None:
            raise StaleReference(self, 'upload bits of')
        return self.client.transport.upload('{}/bits'.format(self.manager.item_path(self.guid)), fileobj, resources)


class Space(Model):
    class Schema:
        name = fields.String(required=True)
        organization = fields.ToOne('organization')
        developers = fields.ToMany('user')
        managers = fields.ToMany('user')
        auditors = fields.ToMany('user')
        apps = fields.ToMany('app')
        domains = fields.ToMany('domain')
        service_instances = fields.ToMany('service_instance')


class Organization(Model):
    class Schema:
        name = fields.String(required=True)
        billing_enabled = fields.Boolean(default=False)
        spaces = fields.ToMany('space')
        domains = fields.ToMany('domain')
        users = fields.ToMany('user')
        managers = fields.ToMany('user')
        billing_managers = fields.ToMany('user')
        auditors = fields.ToMany('user')


class User(Model):
    # address from the token, set on the current user only
    email = None

    class Schema:
        guid = fields.String(identity=True, io='cr')
        admin = fields.Boolean(default=False)
        default_space = fields.ToOne('space')
        spaces = fields.ToMany('space')
        organizations = fields.ToMany('organization')
        managed_organizations = fields.ToMany('organization')
        billing_managed_organizations = fields.ToMany('organization')
        audited_organizations = fields.ToMany('organization')
        managed_spaces = fields.ToMany('space')
        audited_spaces = fields.ToMany('space')


class Domain(Model):
    class Schema:
        name = fields.String(required=True)
        wildcard = fields.Boolean(default=True)
        owning_organization = fields.ToOne('organization')
        spaces = fields.ToMany('space')


class Route(Model):
    class Schema:
        host = fields.String(default='')
        domain = fields.ToOne('domain')
        space = fields.ToOne('space')
        apps = fields.ToMany('app')


class Runtime(Model):
    class Schema:
        name = fields.String(required=True)
        description = fields.String(nullable=True)
        version = fields.String(nullable=True)
        apps = fields.ToMany('app')


class Framework(Model):
    class Schema:
        name = fields.String(required=True)
        description = fields.String(nullable=True)
        apps = fields.ToMany('app')


class Service(Model):
    class Schema:
        label = fields.String(required=True)
        provider = fields.String(required=True)
        url = fields.Uri()
        description = fields.String()
        version = fields.String()
        info_url = fields.Uri(nullable=True)
        active = fields.Boolean(default=False)
        service_plans = fields.ToMany('service_plan')


class ServicePlan(Model):
    class Schema:
        name = fields.String(required=True)
        description = fields.String()
        free = fields.Boolean(default=False)
        service = fields.ToOne('service')
        service_instances = fields.ToMany('service_instance')


class ServiceInstance(Model):
    class Schema:
        name = fields.String(required=True)
        credentials = fields.Object()
        space = fields.ToOne('space')
        service_plan = fields.ToOne('service_plan')
        service_bindings = fields.ToMany('service_binding')


class ServiceBinding(Model):
    class Schema:
        credentials = fields.Object()
        binding_options = fields.Object()
        app = fields.ToOne('app')
        service_instance = fields.ToOne('service_instance')


for resource in (App, Space, Organization, User, Domain, Route, Runtime, Framework,
                 Service, ServicePlan, ServiceInstance, ServiceBinding):
    api.add_resource(resource)
