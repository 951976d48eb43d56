import io
import pytest
from app import create_app
from analyzers.schema import Column

PEOPLE_CSV = (
    "id,name,age,city\n"
    "1,Ann,30,Oslo\n"
    "2,Bob,40,Rome\n"
    "3,Cy,25,Oslo\n"
)


@pytest.fixture
def app(tmp_path):
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite://',
        'SQLALCHEMY_ENGINE_OPTIONS': {},
        'UPLOAD_FOLDER': str(tmp_path / 'uploads'),
        'EXPORT_FOLDER': str(tmp_path / 'exports'),
    })
    yield app
    app.extensions['session_stores'].close_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def upload(client):
    """Post one in-memory file to the upload endpoint"""
    def _upload(filename='people.csv', content=PEOPLE_CSV, **form):
        data = {'files[]': (io.BytesIO(content.encode('utf-8')), filename)}
        data.update(form)
        return client.post('/api/upload', data=data, content_type='multipart/form-data')
    return _upload


@pytest.fixture
def shop_schema():
    return {
        'customers': [
            Column('id', 'INTEGER', primary_key=True),
            Column('name', 'TEXT'),
            Column('city', 'TEXT'),
        ],
        'orders': [
            Column('id', 'INTEGER', primary_key=True),
            Column('customers_id', 'INTEGER'),
            Column('amount', 'REAL'),
        ],
    }


@pytest.fixture
def shop_data():
    return {
        'customers': [
            {'id': 1, 'name': 'Ann', 'city': 'Oslo'},
            {'id': 2, 'name': 'Bob', 'city': 'Rome'},
        ],
        'orders': [
            {'id': 10, 'customers_id': 1, 'amount': 12.5},
            {'id': 11, 'customers_id': 3, 'amount': 30.0},
            {'id': 12, 'customers_id': None, 'amount': 7.25},
        ],
    }
