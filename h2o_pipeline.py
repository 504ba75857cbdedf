""" import, parse, split, train and predict against an H2O server

One call of run_prediction drives the whole chain. Frame names are fixed, so
two runs against the same server at the same time overwrite each other's
frames; model ids default to the algorithm name and collide the same way.
"""

import logging
from collections import namedtuple

import pandas

from h2o_client import H2OClient, H2OError
from h2o_jobs import job_url, wait_for_job
from h2o_settings import BASE_URL, POLL_INTERVAL

LOGGER = logging.getLogger(__name__)

ALGORITHMS = ('glm', 'gbm', 'glrm', 'aggregator', 'deeplearning', 'drf', 'isolationforest',
              'kmeans', 'naivebayes', 'pca', 'targetencoder', 'word2vec')

DATA_FRAME = 'dataSet'
TRAIN_FRAME = 'train'
VALIDATE_FRAME = 'validate'
PREDICT_FRAME = 'predictme'
PREDICTIONS_FRAME = 'prediction'
DEFAULT_SPLIT = (0.85, 0.15)

# ParseSetup fields handed on to Parse, in this order
PARSE_FIELDS = ('source_frames', 'parse_type', 'separator', 'number_columns', 'single_quotes',
                'column_names', 'column_types', 'check_header', 'chunk_size')

PredictionResult = namedtuple('PredictionResult', 'prediction model_type model_confidence')


class InvalidAlgorithmError(H2OError, ValueError):
    """ algorithm is not one of ALGORITHMS """


class PipelineError(H2OError):
    """ a step of run_prediction failed; cause holds the original error """

    def __init__(self, step, cause):
        self.step = step
        self.cause = cause
        super().__init__(f'{step} failed: {cause.__class__.__name__}: {cause}')


def check_algorithm(algorithm):
    name = str(algorithm).strip().lower()
    if name not in ALGORITHMS:
        raise InvalidAlgorithmError(f'{algorithm!r} is not a supported algorithm, use one of: {", ".join(ALGORITHMS)}')
    return name


class Pipeline:
    """ steps of one prediction run, sharing a client and the job wait policy """

    def __init__(self, client, poll_interval=POLL_INTERVAL, job_timeout=None, cancel=None):
        self.client = client
        self.poll_interval = poll_interval
        self.job_timeout = job_timeout
        self.cancel = cancel

    def wait(self, response):
        return wait_for_job(self.client, job_url(response), interval=self.poll_interval,
                            timeout=self.job_timeout, cancel=self.cancel)

    def import_file(self, path):
        """ returns the destination frame names of the import """
        result = self.client.post('ImportFiles', {'path': path})
        return result['destination_frames']

    def parse_setup(self, frame):
        return self.client.post('ParseSetup', {'source_frames': [frame]})

    def parse(self, setup, destination):
        fields = {name: setup[name] for name in PARSE_FIELDS}
        fields['destination_frame'] = destination
        fields['delete_on_done'] = True
        self.wait(self.client.post('Parse', fields))
        return destination

    def load(self, path, destination):
        """ import + parse setup + parse of one file into a named frame """
        frames = self.import_file(path)
        setup = self.parse_setup(frames[0])
        return self.parse(setup, destination)

    def split(self, frame, ratios):
        response = self.client.post('SplitFrame', {
            'dataset': frame,
            'ratios': list(ratios),
            'destination_frames': [TRAIN_FRAME, VALIDATE_FRAME],
        })
        self.wait(response)
        return TRAIN_FRAME, VALIDATE_FRAME

    def train(self, algorithm, target, model_id, params=None):
        fields = {
            'training_frame': TRAIN_FRAME,
            'validation_frame': VALIDATE_FRAME,
            'response_column': target,
            'model_id': model_id,
        }
        fields.update(params or {})
        self.wait(self.client.post(f'ModelBuilders/{algorithm}', fields))
        return model_id

    def predict(self, model_id, frame, fields=None):
        return self.client.post(f'Predictions/models/{model_id}/frames/{frame}', fields)

    def validate(self, model_id):
        """ MSE of the model on the held out frame """
        metrics = self.predict(model_id, VALIDATE_FRAME)['model_metrics'][0]
        return metrics['MSE']

    def fetch(self, frame):
        columns = self.client.get(f'Frames/{frame}')['frames'][0]['columns']
        return {column['label']: column['data'] for column in columns}


def run_prediction(train_path, predict_path, target, algorithm='glm', split=DEFAULT_SPLIT,
                   base_url=BASE_URL, params=None, model_id=None, client=None,
                   poll_interval=POLL_INTERVAL, job_timeout=None, cancel=None):
    """ train a model on train_path and predict the rows of predict_path

    Any failure stops the run and is raised as PipelineError; frames, jobs and
    models created before the failure stay on the server.
    """
    try:
        algorithm = check_algorithm(algorithm)
    except InvalidAlgorithmError as e:
        raise PipelineError('check algorithm', e) from e

    client = client if client is not None else H2OClient(base_url)
    pipeline = Pipeline(client, poll_interval=poll_interval, job_timeout=job_timeout, cancel=cancel)
    model_id = model_id or algorithm

    step = 'load training data'
    try:
        LOGGER.info('loading training data %s into %s', train_path, DATA_FRAME)
        frame = pipeline.load(train_path, DATA_FRAME)

        step = 'split'
        LOGGER.info('splitting %s by %s', frame, list(split))
        pipeline.split(frame, split)

        step = 'train'
        LOGGER.info('training %s model %s on %s', algorithm, model_id, target)
        pipeline.train(algorithm, target, model_id, params)

        step = 'validate'
        confidence = pipeline.validate(model_id)
        LOGGER.info('validation MSE of %s: %s', model_id, confidence)

        step = 'load prediction data'
        LOGGER.info('loading prediction data %s into %s', predict_path, PREDICT_FRAME)
        pipeline.load(predict_path, PREDICT_FRAME)

        step = 'predict'
        response = pipeline.predict(model_id, PREDICT_FRAME, {'predictions_frame': PREDICTIONS_FRAME})
        model_type = response['model_metrics'][0]['model_category']

        step = 'fetch results'
        prediction = pipeline.fetch(PREDICTIONS_FRAME)
    except Exception as e:
        LOGGER.error('pipeline stopped at %s: %s', step, e)
        raise PipelineError(step, e) from e

    return PredictionResult(prediction, model_type, confidence)


def prediction_frame(result):
    """ prediction columns of a PredictionResult as a DataFrame """
    return pandas.DataFrame(result.prediction)
