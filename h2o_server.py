""" java check, start and stop of a local h2o.jar server """

import logging
import os
import re
import signal
import subprocess
import time
from collections import namedtuple
from pathlib import Path

import requests

from h2o_client import H2OError
from h2o_settings import DEFAULT_PORT

LOGGER = logging.getLogger(__name__)

MIN_JAVA = 8
JAVA_VERSION = re.compile(r'version "(\d+)(?:\.(\d+))?')

STOP_TIMEOUT = 30.0

# process is the Popen of a server started here, None for a bare pid
ServerHandle = namedtuple('ServerHandle', 'pid port jar process', defaults=(None,))


class JavaNotFoundError(H2OError):
    pass


class UnsupportedJavaError(H2OError):
    pass


class ServerStartError(H2OError):
    pass


def java_major(version_text):
    """ major version from `java -version` output, '1.8.0_292' counts as 8 """
    found = JAVA_VERSION.search(version_text)
    if not found:
        raise UnsupportedJavaError(f'cannot read java version from: {version_text.strip()[:200]}')
    major = int(found.group(1))
    if major == 1 and found.group(2):
        major = int(found.group(2))
    return major


def check_java(java='java'):
    try:
        done = subprocess.run([java, '-version'], capture_output=True, text=True, check=False)
    except FileNotFoundError:
        raise JavaNotFoundError(f'{java} not found, H2O needs java {MIN_JAVA} or newer') from None
    # java prints its version to stderr
    major = java_major(done.stderr or done.stdout)
    if major < MIN_JAVA:
        raise UnsupportedJavaError(f'java {major} found, H2O needs java {MIN_JAVA} or newer')
    LOGGER.info('java %s found', major)
    return major


def cloud_url(port):
    return f'http://localhost:{port}/3/Cloud'


def wait_until_up(port, timeout=60.0, interval=1.0):
    """ poll /3/Cloud until the server answers or timeout passes """
    deadline = time.monotonic() + timeout
    while True:
        try:
            if requests.get(cloud_url(port), timeout=interval).ok:
                return True
        except requests.RequestException as e:
            # refused while booting, or accepted but slower than interval
            LOGGER.debug('h2o on port %s not up yet: %s', port, e)
        if time.monotonic() >= deadline:
            return False
        time.sleep(interval)


def start_server(jar='h2o.jar', port=DEFAULT_PORT, java='java', memory=None, wait=True, timeout=60.0):
    """ launch h2o.jar and return a ServerHandle for stop_server """
    check_java(java)
    jar = Path(jar).resolve()
    if not jar.exists():
        raise ServerStartError(f'{jar} - not found!')

    command = [java]
    if memory:
        command.append(f'-Xmx{memory}')
    command += ['-jar', str(jar), '-port', str(port)]
    LOGGER.info('starting %s', ' '.join(command))
    process = subprocess.Popen(command, stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL)
    handle = ServerHandle(process.pid, port, str(jar), process)

    if wait and not wait_until_up(port, timeout):
        stop_server(handle)
        raise ServerStartError(f'h2o on port {port} did not answer within {timeout}s')
    return handle


def stop_server(handle):
    """ terminate the server of a ServerHandle (or a bare pid); False if it was already gone

    A handle from start_server also reaps the child, killing it if it ignores
    SIGTERM for STOP_TIMEOUT seconds.
    """
    if isinstance(handle, ServerHandle):
        pid, process = handle.pid, handle.process
    else:
        pid, process = int(handle), None
    try:
        os.kill(pid, signal.SIGTERM)
    except ProcessLookupError:
        LOGGER.warning('h2o process %s is not running', pid)
        return False
    if process is not None:
        try:
            process.wait(STOP_TIMEOUT)
        except subprocess.TimeoutExpired:
            LOGGER.warning('h2o process %s ignored SIGTERM, killing it', pid)
            process.kill()
            process.wait()
    LOGGER.info('h2o process %s stopped', pid)
    return True
