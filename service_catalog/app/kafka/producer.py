"""
Kafka producer for image-processing tasks.
"""

import asyncio
import json
from typing import Dict, Any, Optional

from kafka import KafkaProducer
from kafka.errors import KafkaError

from shared.logging import get_logger
from shared.errors import DependencyError


class KafkaProducerManager:
    """Publishes image-processing tasks to a Kafka topic.

    A broker outage at startup is logged and does not stop the service; the
    producer is then created on the first publish, and only that publish
    fails while the broker stays unreachable.
    """

    def __init__(self, bootstrap_servers: str, topic: str, send_timeout: float = 10):
        self.bootstrap_servers = bootstrap_servers
        self.topic = topic
        self.send_timeout = send_timeout
        self.logger = get_logger("catalog.kafka.producer")
        self.producer: Optional[KafkaProducer] = None
        self._connect_lock = asyncio.Lock()

    async def start(self):
        """Start the Kafka producer."""
        try:
            await self._connect()
        except DependencyError:
            self.logger.warning("Kafka unavailable at startup, will connect on first publish", topic=self.topic)

    async def stop(self):
        """Stop the Kafka producer."""
        if self.producer:
            self.producer.flush()
            self.producer.close()
            self.producer = None
            self.logger.info("Kafka producer stopped")

    async def publish(self, payload: Dict[str, Any], key: Optional[str] = None) -> None:
        """Send ``payload`` and wait for the broker acknowledgement."""
        producer = self.producer or await self._connect()

        try:
            record_metadata = await asyncio.to_thread(self._send_and_wait, producer, payload, key)
        except KafkaError as e:
            self.logger.error("Kafka error sending message", topic=self.topic, error=str(e))
            raise DependencyError("kafka", str(e), details={"topic": self.topic}) from e

        self.logger.info(
            "Message published",
            topic=self.topic,
            partition=record_metadata.partition,
            offset=record_metadata.offset
        )

    async def _connect(self) -> KafkaProducer:
        async with self._connect_lock:
            if self.producer is not None:
                return self.producer

            try:
                self.producer = await asyncio.to_thread(self._create_producer)
            except KafkaError as e:
                self.logger.error("Failed to start Kafka producer", error=str(e))
                raise DependencyError("kafka", str(e), details={"topic": self.topic}) from e

            self.logger.info("Kafka producer started", topic=self.topic)
            return self.producer

    def _create_producer(self) -> KafkaProducer:
        return KafkaProducer(
            bootstrap_servers=self.bootstrap_servers,
            value_serializer=lambda x: json.dumps(x).encode('utf-8'),
            key_serializer=lambda x: x.encode('utf-8') if x else None,
            acks='all',
            retries=3,
            linger_ms=10,
        )

    def _send_and_wait(self, producer: KafkaProducer, payload: Dict[str, Any], key: Optional[str]):
        future = producer.send(self.topic, value=payload, key=key)
        return future.get(timeout=self.send_timeout)
