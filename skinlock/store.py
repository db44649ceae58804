"""Record stores tracking installed skins"""

import os
import logging
from typing import Dict, Optional
from urllib.parse import urlparse

import boto3
import yaml
from botocore.config import Config as BotoConfig
from botocore.exceptions import ClientError

logger = logging.getLogger(__name__)

_MISSING_CODES = ('404', 'NoSuchKey', 'NotFound')


class ManifestStore:
    """Skin records kept in a single local YAML manifest"""

    def __init__(self, path: str):
        self.path = path

    def load(self) -> Dict:
        """Load the manifest, empty if the file does not exist yet"""
        if not os.path.exists(self.path):
            return {'skins': {}}
        with open(self.path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f) or {}
        data.setdefault('skins', {})
        return data

    def save(self, data: Dict):
        """Write the manifest back to disk"""
        parent = os.path.dirname(self.path)
        if parent:
            os.makedirs(parent, exist_ok=True)
        with open(self.path, 'w', encoding='utf-8') as f:
            yaml.safe_dump(data, f, default_flow_style=False, sort_keys=True)

    def exists(self, name: str) -> bool:
        return name in self.load()['skins']

    def snapshot(self) -> Dict[str, Dict]:
        return dict(self.load()['skins'])

    def is_in_use(self, name: str) -> bool:
        record = self.load()['skins'].get(name) or {}
        return bool(record.get('sections'))

    def add(self, name: str, **info):
        data = self.load()
        data['skins'][name] = info
        self.save(data)
        logger.info(f"registered skin: {name}")

    def remove(self, name: str):
        data = self.load()
        if data['skins'].pop(name, None) is not None:
            self.save(data)
            logger.info(f"unregistered skin: {name}")


class S3ManifestStore:
    """Skin records kept as one YAML object per skin in an S3 bucket"""

    def __init__(self, s3_client, bucket: str, prefix: str = ''):
        self.s3_client = s3_client
        self.bucket = bucket
        self.prefix = prefix.strip('/')

    def _key(self, name: str) -> str:
        return f"{self._records_prefix()}{name}.yml"

    def _records_prefix(self) -> str:
        if self.prefix:
            return f"{self.prefix}/skins/"
        return 'skins/'

    @staticmethod
    def _is_missing(error: ClientError) -> bool:
        return error.response.get('Error', {}).get('Code') in _MISSING_CODES

    def _get_record(self, name: str) -> Optional[Dict]:
        try:
            response = self.s3_client.get_object(Bucket=self.bucket, Key=self._key(name))
        except ClientError as e:
            if self._is_missing(e):
                return None
            raise
        return yaml.safe_load(response['Body'].read()) or {}

    def exists(self, name: str) -> bool:
        """Point query for a single skin record"""
        try:
            self.s3_client.head_object(Bucket=self.bucket, Key=self._key(name))
            return True
        except ClientError as e:
            if self._is_missing(e):
                return False
            raise

    def snapshot(self) -> Dict[str, Dict]:
        """Names of all recorded skins; record bodies are not fetched"""
        records_prefix = self._records_prefix()
        names = {}
        paginator = self.s3_client.get_paginator('list_objects_v2')
        for page in paginator.paginate(Bucket=self.bucket, Prefix=records_prefix):
            for obj in page.get('Contents', []):
                key = obj['Key'][len(records_prefix):]
                if key.endswith('.yml') and '/' not in key:
                    names[key[:-len('.yml')]] = {}
        return names

    def is_in_use(self, name: str) -> bool:
        record = self._get_record(name) or {}
        return bool(record.get('sections'))

    def add(self, name: str, **info):
        body = yaml.safe_dump(info, default_flow_style=False).encode('utf-8')
        self.s3_client.put_object(Bucket=self.bucket, Key=self._key(name), Body=body)
        logger.info(f"registered skin: {name}")

    def remove(self, name: str):
        self.s3_client.delete_object(Bucket=self.bucket, Key=self._key(name))
        logger.info(f"unregistered skin: {name}")


def create_s3_client(endpoint_url: Optional[str] = None,
                     access_key: Optional[str] = None,
                     secret_key: Optional[str] = None,
                     region: Optional[str] = None):
    """Build an S3 client, falling back to OSS_*/AWS_* environment variables"""
    access_key = access_key or os.environ.get('OSS_ACCESS_KEY_ID') or os.environ.get('AWS_ACCESS_KEY_ID')
    secret_key = secret_key or os.environ.get('OSS_SECRET_ACCESS_KEY') or os.environ.get('AWS_SECRET_ACCESS_KEY')
    region = region or os.environ.get('OSS_REGION') or os.environ.get('AWS_DEFAULT_REGION')

    config = BotoConfig(
        s3={
            'addressing_style': 'virtual',
            'payload_signing_enabled': False,
        }
    )

    return boto3.client(
        's3',
        config=config,
        region_name=region,
        endpoint_url=endpoint_url,
        aws_access_key_id=access_key,
        aws_secret_access_key=secret_key
    )


def open_store(config: Dict, s3_client=None):
    """Open the record store named by config['store']

    Local paths open a ManifestStore; 's3://bucket/prefix' opens an
    S3ManifestStore. Without a 'store' entry the manifest defaults to
    '<base_path>/skins.yml'.
    """
    location = config.get('store')
    if not location:
        return ManifestStore(os.path.join(config['base_path'], 'skins.yml'))

    if location.startswith('s3://'):
        parsed = urlparse(location)
        if s3_client is None:
            s3_client = create_s3_client(
                endpoint_url=config.get('endpoint_url'),
                access_key=config.get('access_key'),
                secret_key=config.get('secret_key'),
                region=config.get('region')
            )
        return S3ManifestStore(s3_client, parsed.netloc, parsed.path)

    return ManifestStore(os.path.expanduser(location))
