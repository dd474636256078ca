"""
Network implementation for the Shared-Medium Hub Simulator.

A Network owns one hub and starts its stations, either as separate
processes (the hub reads their standard output and writes their standard
input) or as threads of this process joined to the hub by OS pipes.
"""

import os
import subprocess
import sys
import threading

from HUB_SIM.config import HUB_RUN_TIME, MAX_STNS, STATION_EXIT_TIMEOUT, LISTENER_JOIN_TIMEOUT
from HUB_SIM.datalink.station import StationAgent
from HUB_SIM.errors import CapacityExceeded, RegistrySealedError
from HUB_SIM.physical.channel import Endpoint, create_station_link
from HUB_SIM.physical.hub import Hub
from HUB_SIM.utils.logging_config import setup_logger
from HUB_SIM.utils.station_config import load_station_config

PROGRAM_STN = [sys.executable, "-m", "HUB_SIM.main", "station"]


class Network:
    """Manages the hub and the stations attached to it."""

    def __init__(self, name, capacity=MAX_STNS, station_args=()):
        self.name = name
        self.hub = Hub(name, capacity)
        self.station_args = list(station_args)  # extra CLI options for station processes
        self.processes = {}  # station index -> subprocess.Popen
        self.agents = {}  # station index -> StationAgent (local stations)
        self.threads = []
        self.local_links = []  # parallel to threads
        self.logger = setup_logger(f"Network_{name}", f"network_{name}")

    def _check_capacity(self):
        if self.hub.registry.sealed:
            raise RegistrySealedError(f"Cannot add station: hub {self.name} is already relaying")
        if self.hub.is_full:
            self.logger.error(f"Cannot add station: hub {self.name} is full")
            raise CapacityExceeded(self.hub.registry.capacity)

    def add_station_process(self, config_path):
        """Start a station process for config_path and attach its standard streams to the hub."""
        self._check_capacity()
        config = load_station_config(config_path)
        name = config.station_id

        env = os.environ.copy()
        package_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
        env["PYTHONPATH"] = os.pathsep.join(filter(None, [package_root, env.get("PYTHONPATH")]))

        process = subprocess.Popen(
            PROGRAM_STN + self.station_args + [str(config_path)],
            stdin=subprocess.PIPE,
            stdout=subprocess.PIPE,
            bufsize=0,
            env=env,
        )
        transmit = Endpoint.from_file(process.stdout, f"{name}/tran-hub")
        receive = Endpoint.from_file(process.stdin, f"{name}/rec-hub")
        index = self.hub.add_station(transmit, receive, name)
        self.processes[index] = process
        self.logger.info(f"Started station {name} (pid {process.pid}) from {config_path}")
        return process

    def add_local_station(self, config):
        """Run a station agent in a thread of this process, joined to the hub by pipes."""
        self._check_capacity()
        name = config.station_id
        link = create_station_link(name)
        agent = StationAgent(
            config.station_id,
            config.destination_id,
            config.messages,
            inbound=link.station_inbound,
            outbound=link.station_outbound,
        )
        index = self.hub.add_station(link.hub_transmit, link.hub_receive, name)

        thread = threading.Thread(target=self._run_local, args=(agent, link), name=f"station-{name}")
        thread.daemon = True
        self.agents[index] = agent
        self.threads.append(thread)
        self.local_links.append(link)
        self.logger.info(f"Added local station {name}")
        return agent

    def _run_local(self, agent, link):
        try:
            agent.run()
        finally:
            link.close_station_side()

    def start(self):
        """Start the local station threads and the hub listeners."""
        for thread in self.threads:
            thread.start()
        self.hub.start()

    def run(self, duration=HUB_RUN_TIME):
        """Relay for duration seconds, shut the hub down and wait for the stations."""
        self.start()
        self.logger.info(f"Network {self.name} running for {duration:.1f}s")
        self.hub.pool.run_for(duration)
        self.shutdown()

    def shutdown(self):
        """Close the hub side of every channel and reap the stations."""
        self.hub.shutdown()

        for index, process in self.processes.items():
            name = self.hub.registry[index].name
            try:
                returncode = process.wait(timeout=STATION_EXIT_TIMEOUT)
                self.logger.info(f"Station {name} exited with status {returncode}")
            except subprocess.TimeoutExpired:
                self.logger.warning(f"Station {name} did not exit, terminating it")
                process.terminate()
                process.wait()

        for thread, link in zip(self.threads, self.local_links):
            if thread.ident is None:
                link.close_station_side()
                continue
            thread.join(timeout=LISTENER_JOIN_TIMEOUT)
            if thread.is_alive():
                self.logger.warning(f"{thread.name} is still running")

        self.logger.info(f"Network {self.name} shut down")

    def display(self):
        """Display the network topology."""
        print(f"\nNetwork: {self.name}")
        print(f"  {self.hub}")
        for station in self.hub.registry:
            if station.index in self.processes:
                kind = f"process {self.processes[station.index].pid}"
            else:
                agent = self.agents.get(station.index)
                kind = str(agent) if agent else "external"
            print(f"    [{station.index}] {station.name}: {kind}")
