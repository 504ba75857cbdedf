""" command line interface to a local H2O server """

import fire
import simplejson as json

from h2o_client import H2OClient
from h2o_pipeline import ALGORITHMS, DEFAULT_SPLIT, prediction_frame, run_prediction
from h2o_server import check_java, start_server, stop_server
from h2o_settings import load_settings, setup_logging


def algorithms():
    return list(ALGORITHMS)


def predict(train, data, target, algorithm='glm', split=DEFAULT_SPLIT, base_url=None,
            params=None, model_id=None, timeout=None, table=False, verbose=0):
    """ train on `train`, predict rows of `data`, print the result as json (or a table) """
    setup_logging(verbose)
    settings = load_settings()
    client = H2OClient(base_url or settings.base_url, timeout=settings.request_timeout)
    result = run_prediction(train, data, target,
                            algorithm=algorithm,
                            split=split,
                            params=params,
                            model_id=model_id,
                            client=client,
                            poll_interval=settings.poll_interval,
                            job_timeout=timeout if timeout is not None else settings.job_timeout)
    if table:
        return prediction_frame(result).to_string()
    return json.dumps(result._asdict())


def frames(base_url=None):
    client = H2OClient(base_url or load_settings().base_url)
    return [frame['frame_id']['name'] for frame in client.get('Frames')['frames']]


def models(base_url=None):
    client = H2OClient(base_url or load_settings().base_url)
    return [model['model_id']['name'] for model in client.get('Models')['models']]


def java():
    return check_java(load_settings().java)


def start(jar=None, port=None, memory=None, verbose=0):
    setup_logging(verbose)
    settings = load_settings()
    handle = start_server(jar or settings.jar, port or settings.port, java=settings.java, memory=memory)
    return {'pid': handle.pid, 'port': handle.port}


def stop(pid, verbose=0):
    setup_logging(verbose)
    return stop_server(pid)


COMMANDS = {
    'algorithms': algorithms,
    'predict': predict,
    'frames': frames,
    'models': models,
    'java': java,
    'start': start,
    'stop': stop,
}


def main():
    fire.Fire(COMMANDS)


if __name__ == '__main__':
    main()
