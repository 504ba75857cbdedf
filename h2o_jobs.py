""" waiting on asynchronous H2O jobs (parse, split, model build) """

import logging
import time

from h2o_client import H2OError
from h2o_settings import POLL_INTERVAL

LOGGER = logging.getLogger(__name__)

DONE = 'DONE'
FAILED_STATUSES = ('FAILED', 'CANCELLED')


class JobFailedError(H2OError):
    """ job ended in FAILED or CANCELLED on the server """

    def __init__(self, job_url, status, exception=None):
        self.job_url = job_url
        self.status = status
        self.exception = exception
        text = f'job {job_url} ended with status {status}'
        if exception:
            text += f': {exception}'
        super().__init__(text)


class JobTimeoutError(H2OError):
    """ job did not reach DONE before the deadline """


class JobCancelledError(H2OError):
    """ waiting was cancelled by the caller """


def job_url(response):
    """ job key URL of a response that started a job

    Parse and ModelBuilders wrap the job as {"job": {...}}, SplitFrame answers
    with the job itself.
    """
    job = response['job'] if 'job' in response else response
    return job['key']['URL']


def job_status(client, url):
    """ current job record, as returned by GET on the job key URL """
    return client.get_path(url)['jobs'][0]


def wait_for_job(client, url, interval=POLL_INTERVAL, timeout=None, cancel=None):
    """ block until the job at url is DONE and return its job record

    With timeout=None and no cancel event the wait is unbounded. cancel is a
    threading.Event; setting it ends the wait at the next interval.
    """
    deadline = None if timeout is None else time.monotonic() + timeout
    checks = 0
    while True:
        job = job_status(client, url)
        checks += 1
        status = job['status']
        LOGGER.debug('job %s: %s (check %d, progress %s)', url, status, checks, job.get('progress'))
        if status == DONE:
            return job
        if status in FAILED_STATUSES:
            raise JobFailedError(url, status, job.get('exception'))
        if deadline is not None and time.monotonic() >= deadline:
            raise JobTimeoutError(f'job {url} not done after {timeout}s ({checks} checks, last status {status})')
        if cancel is None:
            time.sleep(interval)
        elif cancel.wait(interval):
            raise JobCancelledError(f'wait for job {url} cancelled after {checks} checks')
