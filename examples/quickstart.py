import logging
import os

from cf_potion import Client

logging.basicConfig(level=logging.DEBUG)

client = Client(os.environ.get('CF_TARGET', 'https://api.example.com'), token=os.environ.get('CF_TOKEN'))

print(client.info())

user = client.current_user
if user is not None:
    client.current_space = user.default_space

for app in client.apps():
    print(app.name, app.state, app.space.name)

app = client.app()
app.name = 'hello'
app.space = client.current_space
app.create()

with open('hello.zip', 'rb') as fileobj:
    app.upload(fileobj)

app.state = 'STARTED'
app.update()

for route in app.routes:
    print(route.host, route.domain.name)
