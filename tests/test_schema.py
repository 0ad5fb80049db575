from unittest import TestCase

from cf_potion import Api, fields, v1, v2
from cf_potion.manager import EntityManager, FlatManager
from cf_potion.resource import Resource
from cf_potion.schema import Description, FieldSet, describe


class FieldSetTestCase(TestCase):

    def test_define_and_describe(self):
        fs = FieldSet()
        fs.define_attribute('name', fields.String())
        fs.define_relationship('space', fields.ToOne('space'))
        fs.define_relationship('routes', fields.ToMany('route'))
        fs.define_attribute('memory', fields.Integer())

        description = fs.describe()
        self.assertIsInstance(description, Description)
        self.assertEqual(['name', 'memory'], list(description.attributes))
        self.assertEqual(['space'], list(description.to_one))
        self.assertEqual(['routes'], list(description.to_many))

        self.assertIn('name', fs)
        self.assertEqual('memory', fs['memory'].name)

    def test_define_wrong_kind(self):
        fs = FieldSet()

        with self.assertRaises(RuntimeError):
            fs.define_attribute('space', fields.ToOne('space'))

        with self.assertRaises(RuntimeError):
            fs.define_relationship('name', fields.String())

    def test_identity(self):
        fs = FieldSet({'email': fields.Email(identity=True), 'admin': fields.Boolean()})
        self.assertEqual('email', fs.identity)
        self.assertIs(fs['email'], fs.identity_field)

        with self.assertRaises(RuntimeError):
            fs.set('name', fields.String(identity=True))

        with self.assertRaises(RuntimeError):
            FieldSet().set('space', fields.ToOne('space', identity=True))

    def test_required(self):
        fs = FieldSet({'name': fields.String(), 'label': fields.String(required=True)}, required_fields=['name'])

        self.assertTrue(fs.is_required('name'))
        self.assertTrue(fs.is_required('label'))

        fs.set('memory', fields.Integer())
        self.assertFalse(fs.is_required('memory'))


class ResourceMetaTestCase(TestCase):

    def test_meta_defaults(self):
        class ServicePlan(Resource):
            pass

        self.assertEqual('service_plan', ServicePlan.meta.name)
        self.assertEqual('service_plans', ServicePlan.meta.plural)
        self.assertIsInstance(ServicePlan.manager, EntityManager)
        self.assertIs(ServicePlan, ServicePlan.manager.resource)

    def test_meta_overrides(self):
        class Thing(Resource):
            class Meta:
                name = 'entry'
                plural = 'entries'
                manager = FlatManager
                id_attribute = 'title'
                read_only_fields = ['created']
                write_only_fields = ['secret']

            class Schema:
                title = fields.String()
                created = fields.Integer()
                secret = fields.String()

        self.assertEqual('entry', Thing.meta.name)
        self.assertEqual('entries', Thing.meta.plural)
        self.assertIsInstance(Thing.manager, FlatManager)
        self.assertEqual('title', Thing.schema.identity)
        self.assertTrue(Thing.schema['created'].read_only)
        self.assertTrue(Thing.schema['secret'].write_only)

    def test_meta_inheritance(self):
        class Base(Resource):
            class Meta:
                manager = FlatManager
                manifest_depth = 3

            class Schema:
                name = fields.String(identity=True)

        class Derived(Base):
            class Schema:
                size = fields.Integer()

        self.assertEqual('derived', Derived.meta.name)
        self.assertEqual('deriveds', Derived.meta.plural)
        self.assertEqual(3, Derived.meta.manifest_depth)
        self.assertIsInstance(Derived.manager, FlatManager)
        self.assertIsNot(Base.manager, Derived.manager)

        self.assertEqual(['name', 'size'], list(Derived.schema.fields))
        self.assertIs(Base, Base.schema['name'].resource)
        self.assertIs(Derived, Derived.schema['name'].resource)
        self.assertIsNot(Base.schema['name'], Derived.schema['name'])
        self.assertEqual('name', Derived.schema.identity)

    def test_schema_is_not_shared_with_subclasses(self):
        class Base(Resource):
            class Schema:
                name = fields.String()

        class Derived(Base):
            pass

        Derived.define_attribute('extra', fields.String)

        self.assertIn('extra', Derived.schema)
        self.assertNotIn('extra', Base.schema)

    def test_multiple_identities(self):
        with self.assertRaises(RuntimeError):
            class Broken(Resource):
                class Schema:
                    name = fields.String(identity=True)
                    email = fields.Email(identity=True)

        with self.assertRaises(RuntimeError):
            class BrokenIdAttribute(Resource):
                class Meta:
                    id_attribute = 'email'

                class Schema:
                    name = fields.String(identity=True)
                    email = fields.Email()

        with self.assertRaises(RuntimeError):
            class MissingIdAttribute(Resource):
                class Meta:
                    id_attribute = 'email'

    def test_identity_relationship(self):
        with self.assertRaises(RuntimeError):
            class Broken(Resource):
                class Schema:
                    owner = fields.ToOne('owner', identity=True)

    def test_shadowed_member(self):
        with self.assertRaises(RuntimeError):
            class Broken(Resource):
                class Schema:
                    delete = fields.Boolean()

        with self.assertRaises(RuntimeError):
            class BrokenGuid(Resource):
                class Schema:
                    guid = fields.String()

        class Allowed(Resource):
            class Schema:
                guid = fields.String(identity=True)

        self.assertEqual('guid', Allowed.schema.identity)

    def test_define_relationship(self):
        class Thing(Resource):
            pass

        field = Thing.define_relationship('parent', 'to_one', 'self', depth=2)
        self.assertIsInstance(field, fields.ToOne)
        self.assertIs(Thing, field.target)
        self.assertEqual(2, field.depth)

        field = Thing.define_relationship('followers', 'to_many', 'self')
        self.assertIsInstance(field, fields.ToMany)
        self.assertEqual(('entity', 'follower_guids'), field.write_path)

        Thing.define_relationship('siblings', 'to_many', 'self', singular='brother')
        self.assertEqual(('entity', 'brother_guids'), Thing.schema['siblings'].write_path)

        with self.assertRaises(RuntimeError):
            Thing.define_relationship('owner', 'many_to_many', 'self')

        with self.assertRaises(RuntimeError):
            Thing.define_relationship('update', 'to_one', 'self')

    def test_describe(self):
        description = describe(v2.App)

        self.assertEqual(['created_at', 'updated_at', 'name', 'production', 'environment_json', 'memory',
                          'instances', 'file_descriptors', 'disk_quota', 'state', 'command', 'console'],
                         list(description.attributes))
        self.assertEqual(['space', 'runtime', 'framework'], list(description.to_one))
        self.assertEqual(['service_bindings', 'routes'], list(description.to_many))


class ApiTestCase(TestCase):

    def test_add_resource(self):
        api = Api(prefix='/v3')

        class Pet(Resource):
            pass

        self.assertIs(Pet, api.add_resource(Pet))
        self.assertIs(api, Pet.api)
        self.assertEqual('/v3/pets', Pet.route_prefix)
        self.assertEqual('/v3/pets', Pet.manager.collection_path)

        api.add_resource(Pet)
        self.assertEqual({'pet': Pet}, api.resources)

        with self.assertRaises(RuntimeError):
            Api().add_resource(Pet)

    def test_lookup(self):
        self.assertIs(v2.ServiceInstance, v2.api.lookup('service_instance'))
        self.assertIs(v2.ServiceInstance, v2.api.lookup('service_instances'))
        self.assertIsNone(v2.api.lookup('stack'))

        self.assertEqual('/apps', v1.App.route_prefix)
        self.assertEqual('/v2/apps', v2.App.route_prefix)

    def test_relationship_targets_resolve_within_api(self):
        self.assertIs(v2.Space, v2.App.schema['space'].target)
        self.assertIs(v2.User, v2.Space.schema['developers'].target)
        self.assertIs(v2.Organization, v2.User.schema['managed_organizations'].target)
        self.assertEqual(('entity', 'managed_organization_guids'),
                         v2.User.schema['managed_organizations'].write_path)
