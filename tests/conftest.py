import pytest

from h2o_client import H2OClient

ROOT = 'http://h2o.test:54321'
BASE_URL = ROOT + '/3/{endpoint}'

PARSE_SETUP = {
    'source_frames': [{'name': 'nfs://data/train.csv', 'type': 'Key<Frame>'}],
    'parse_type': 'CSV',
    'separator': 44,
    'number_columns': 3,
    'single_quotes': False,
    'column_names': ['x', 'y', 'label'],
    'column_types': ['Numeric', 'Numeric', 'Enum'],
    'check_header': 1,
    'chunk_size': 4194304,
    'na_strings': None,
}


class FakeResponse:

    def __init__(self, body, status_code=200):
        self.body = body
        self.status_code = status_code
        self.text = str(body)

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        if isinstance(self.body, Exception):
            raise self.body
        return self.body


class FakeH2O:
    """ in-memory stand-in for a requests.Session talking to H2O

    routes maps a path (without server root) to a response body, a list of
    bodies served one per call (last one repeats), or a FakeResponse.
    """

    def __init__(self, routes=None):
        self.routes = dict(routes or {})
        self.calls = []

    def _answer(self, method, url, body=None):
        path = url[len(ROOT):]
        self.calls.append((method, path, body))
        if path not in self.routes:
            return FakeResponse({'msg': f'no route {path}'}, status_code=404)
        answer = self.routes[path]
        if isinstance(answer, list):
            answer = answer.pop(0) if len(answer) > 1 else answer[0]
        if isinstance(answer, FakeResponse):
            return answer
        return FakeResponse(answer)

    def post(self, url, data=None, headers=None, timeout=None):
        return self._answer('POST', url, data)

    def get(self, url, timeout=None):
        return self._answer('GET', url)

    def paths(self):
        return [(method, path) for method, path, _ in self.calls]

    def body(self, method, path, index=0):
        bodies = [body for m, p, body in self.calls if (m, p) == (method, path)]
        return bodies[index]


def job(status, exception=None):
    record = {'status': status, 'progress': 1.0 if status == 'DONE' else 0.5}
    if exception:
        record['exception'] = exception
    return {'jobs': [record]}


def started(key):
    return {'job': {'key': {'name': key, 'URL': f'/3/Jobs/{key}'}}}


def h2o_routes(algorithm='glm', model_id=None):
    """ canned answers for a complete successful prediction run """
    model_id = model_id or algorithm
    return {
        '/3/ImportFiles': [
            {'destination_frames': ['nfs://data/train.csv']},
            {'destination_frames': ['nfs://data/predict.csv']},
        ],
        '/3/ParseSetup': PARSE_SETUP,
        '/3/Parse': [started('parse1'), started('parse2')],
        '/3/Jobs/parse1': [job('RUNNING'), job('DONE')],
        '/3/Jobs/parse2': job('DONE'),
        '/3/SplitFrame': {'key': {'name': 'split', 'URL': '/3/Jobs/split'}},
        '/3/Jobs/split': job('DONE'),
        f'/3/ModelBuilders/{algorithm}': started('build'),
        '/3/Jobs/build': [job('RUNNING'), job('RUNNING'), job('DONE')],
        f'/3/Predictions/models/{model_id}/frames/validate': {
            'model_metrics': [{'MSE': 0.0421, 'model_category': 'Binomial'}],
        },
        f'/3/Predictions/models/{model_id}/frames/predictme': {
            'model_metrics': [{'MSE': 'NaN', 'model_category': 'Binomial'}],
            'predictions_frame': {'name': 'prediction'},
        },
        '/3/Frames/prediction': {
            'frames': [{'columns': [
                {'label': 'predict', 'data': [1, 0]},
                {'label': 'p0', 'data': [0.1, 0.8]},
                {'label': 'p1', 'data': [0.9, 0.2]},
            ]}],
        },
    }


class FakeClock:
    """ replaces the time module inside h2o_jobs """

    def __init__(self):
        self.now = 0.0
        self.sleeps = []

    def monotonic(self):
        return self.now

    def sleep(self, seconds):
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def clock(monkeypatch):
    import h2o_jobs
    fake = FakeClock()
    monkeypatch.setattr(h2o_jobs, 'time', fake)
    return fake


@pytest.fixture
def h2o():
    return FakeH2O(h2o_routes())


@pytest.fixture
def client(h2o):
    return H2OClient(BASE_URL, session=h2o)
